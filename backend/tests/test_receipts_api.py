from backend.app.db.models.core_types import Currency, POStatus


def _receipt(po, *lines, **extra):
    body = {
        "purchase_order_id": po.id,
        "receipt_date": "2025-01-25",
        "items": [
            {"purchase_order_item_id": item_id, "quantity_received": qty, "unit_price": price}
            for item_id, qty, price in lines
        ],
    }
    body.update(extra)
    return body


def test_receipt_draft_prefills_floor(client, products, make_order, tracking):
    po = make_order([(products[0], 6, 1000), (products[1], 2, 400)], tracking_number="TRK-1")
    tracking("TRK-1", po)

    r = client.get(f"/v1/purchase-orders/{po.id}/receipt-draft")
    assert r.status_code == 200
    data = r.json()

    assert data["can_create_receipt"] is True
    assert [ln["max_quantity"] for ln in data["lines"]] == [6, 2]
    assert [ln["floor_price"] for ln in data["lines"]] == [338500.0, 337900.0]


def test_receipt_draft_rejects_bad_rate(client, products, make_order):
    po = make_order([(products[0], 1, 10)], currency=Currency.usd)

    r = client.get(f"/v1/purchase-orders/{po.id}/receipt-draft", params={"exchange_rate": 0})
    assert r.status_code == 400


def test_partial_then_full_receipt(client, products, make_order):
    po = make_order([(products[0], 10, 1000), (products[1], 4, 500)])
    first, second = po.items[0].id, po.items[1].id

    r = client.post("/v1/receipts", json=_receipt(po, (first, 4, 700)))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["items"][0]["unit_price"] == 1000.0
    assert data["items"][0]["price_adjusted"] is True
    assert data["total_amount"] == 4000.0

    detail = client.get(f"/v1/purchase-orders/{po.id}").json()
    assert detail["status"] == "partial"
    assert [i["state"] for i in detail["items"]] == ["partial", "pending"]

    r = client.post("/v1/receipts", json=_receipt(po, (first, 6, 1200), (second, 4, 500)))
    assert r.status_code == 200, r.text
    assert r.json()["items"][0]["price_adjusted"] is False

    detail = client.get(f"/v1/purchase-orders/{po.id}").json()
    assert detail["status"] == "received"
    assert detail["can_create_receipt"] is False

    receipts = client.get("/v1/receipts", params={"purchase_order_id": po.id}).json()
    assert len(receipts) == 2
    assert client.get(f"/v1/receipts/{receipts[0]['id']}").status_code == 200


def test_receipt_quantity_above_remaining(client, products, make_order):
    po = make_order([(products[0], 3, 100)])

    r = client.post("/v1/receipts", json=_receipt(po, (po.items[0].id, 5, 100)))
    assert r.status_code == 400
    assert "max=3" in r.json()["detail"]


def test_receipt_requires_lines(client, products, make_order):
    po = make_order([(products[0], 3, 100)])

    r = client.post("/v1/receipts", json=_receipt(po))
    assert r.status_code == 400


def test_receipt_refused_on_pending_order(client, products, make_order):
    po = make_order([(products[0], 3, 100)], status=POStatus.pending)

    r = client.post("/v1/receipts", json=_receipt(po, (po.items[0].id, 1, 100)))
    assert r.status_code == 400
    assert r.json()["detail"] == "Réception impossible pour cette commande"


def test_receipt_with_exchange_rate(client, products, make_order):
    po = make_order([(products[0], 2, "12.50")], currency=Currency.eur)

    r = client.post("/v1/receipts", json=_receipt(po, (po.items[0].id, 2, 10), exchange_rate=4800))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["exchange_rate"] == 4800.0
    assert data["currency"] == "MGA"
    assert data["items"][0]["unit_price"] == 60000.0
    assert data["total_amount"] == 120000.0


def test_foreign_receipt_without_rate_keeps_entered_price(client, products, make_order, tracking):
    po = make_order([(products[0], 1, 10)], currency=Currency.usd, tracking_number="TRK-USD")
    tracking("TRK-USD", po)

    r = client.post("/v1/receipts", json=_receipt(po, (po.items[0].id, 1, 10)))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["currency"] == "USD"
    assert data["exchange_rate"] is None
    assert data["items"][0]["unit_price"] == 10.0
    assert data["items"][0]["price_adjusted"] is False
    assert data["total_amount"] == 10.0


def test_receipt_for_unknown_order(client):
    r = client.post("/v1/receipts", json={"purchase_order_id": 999, "items": []})
    assert r.status_code == 404
