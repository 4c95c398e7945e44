from backend.app.db.models.core_types import POStatus


def _payload(products, **extra):
    body = {
        "order_date": "2025-01-10",
        "expected_delivery_date": "2025-01-30",
        "currency": "MGA",
        "items": [
            {"product_id": products[0].id, "quantity_ordered": 10, "unit_price": 1500},
            {"product_id": products[1].id, "quantity_ordered": 3, "unit_price": "2000.50"},
        ],
    }
    body.update(extra)
    return body


def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_create_order_computes_totals(client, products, supplier):
    r = client.post("/v1/purchase-orders", json=_payload(products, supplier_id=supplier.id))
    assert r.status_code == 200, r.text
    data = r.json()

    assert data["order_number"].startswith("PO-20250110-")
    assert data["status"] == "draft"
    assert data["supplier_name"] == supplier.name
    assert data["total_amount"] == 21001.5
    assert [i["total_price"] for i in data["items"]] == [15000.0, 6001.5]
    assert data["can_edit"] is True
    assert data["can_create_receipt"] is False
    assert data["progress"]["total_days"] == 20


def test_create_order_starts_lines_unreceived(client, products, supplier):
    body = _payload(products, supplier_id=supplier.id)
    body["items"][0]["quantity_received"] = 5

    r = client.post("/v1/purchase-orders", json=body)
    assert r.status_code == 200, r.text
    item = r.json()["items"][0]
    assert item["quantity_received"] == 0
    assert item["state"] == "pending"
    assert products[0].current_stock == 0


def test_create_order_requires_items(client, products):
    r = client.post("/v1/purchase-orders", json=_payload(products, items=[]))
    assert r.status_code == 400
    assert r.json()["detail"] == "Veuillez ajouter au moins un article à la commande"


def test_create_order_rejects_duplicate_products(client, products):
    line = {"product_id": products[0].id, "quantity_ordered": 1, "unit_price": 10}
    r = client.post("/v1/purchase-orders", json=_payload(products, items=[line, line]))
    assert r.status_code == 409
    assert r.json()["detail"] == "Ce produit est déjà dans la commande"


def test_create_order_rejects_unknown_supplier(client, products):
    r = client.post("/v1/purchase-orders", json=_payload(products, supplier_id=999))
    assert r.status_code == 400
    assert r.json()["detail"] == "Fournisseur invalide"


def test_duplicate_order_number_conflicts(client, products):
    assert client.post("/v1/purchase-orders", json=_payload(products, order_number="PO-X")).status_code == 200

    r = client.post("/v1/purchase-orders", json=_payload(products, order_number="PO-X"))
    assert r.status_code == 409
    assert r.json()["detail"] == "Un numéro de commande similaire existe déjà"


def test_update_only_allowed_on_draft(client, products):
    po = client.post("/v1/purchase-orders", json=_payload(products)).json()

    body = _payload(products, items=[{"product_id": products[2].id, "quantity_ordered": 2, "unit_price": 50}])
    r = client.put(f"/v1/purchase-orders/{po['id']}", json=body)
    assert r.status_code == 200, r.text
    assert [i["product_id"] for i in r.json()["items"]] == [products[2].id]
    assert r.json()["total_amount"] == 100.0

    assert client.patch(f"/v1/purchase-orders/{po['id']}/status", json={"status": "ordered"}).status_code == 200
    r = client.put(f"/v1/purchase-orders/{po['id']}", json=body)
    assert r.status_code == 409


def test_status_change_rules(client, products):
    po = client.post("/v1/purchase-orders", json=_payload(products)).json()

    r = client.patch(f"/v1/purchase-orders/{po['id']}/status", json={"status": "received"})
    assert r.status_code == 409

    r = client.patch(f"/v1/purchase-orders/{po['id']}/status", json={"status": "ordered"})
    assert r.status_code == 200
    assert r.json()["status"] == "ordered"
    assert r.json()["can_create_receipt"] is True


def test_add_item_to_ordered_order(client, products, make_order):
    po = make_order([(products[0], 2, 100)])

    r = client.post(
        f"/v1/purchase-orders/{po.id}/items",
        json={"product_id": products[1].id, "quantity_ordered": 4, "unit_price": 25},
    )
    assert r.status_code == 200, r.text
    assert r.json()["total_price"] == 100.0

    detail = client.get(f"/v1/purchase-orders/{po.id}").json()
    assert len(detail["items"]) == 2
    assert detail["total_amount"] == 300.0

    r = client.post(
        f"/v1/purchase-orders/{po.id}/items",
        json={"product_id": products[1].id, "quantity_ordered": 1, "unit_price": 25},
    )
    assert r.status_code == 409


def test_add_item_refused_on_closed_order(client, products, make_order):
    po = make_order([(products[0], 2, 100)], status=POStatus.cancelled)

    r = client.post(
        f"/v1/purchase-orders/{po.id}/items",
        json={"product_id": products[1].id, "quantity_ordered": 1, "unit_price": 25},
    )
    assert r.status_code == 409


def test_list_filters(client, products, make_order):
    make_order([(products[0], 1, 10)], status=POStatus.draft)
    make_order([(products[0], 1, 10)])

    assert len(client.get("/v1/purchase-orders").json()) == 2
    ordered = client.get("/v1/purchase-orders", params={"status": "ordered"}).json()
    assert [o["status"] for o in ordered] == ["ordered"]
    assert len(client.get("/v1/purchase-orders", params={"search": "TEST-SUP"}).json()) == 2


def test_missing_order_is_404(client):
    assert client.get("/v1/purchase-orders/12345").status_code == 404


def test_progress_endpoint(client, products, make_order):
    po = make_order([(products[0], 1, 10)])
    assert client.get(f"/v1/purchase-orders/{po.id}/progress").json() is None


def test_order_pdf(client, products, make_order):
    po = make_order([(products[0], 2, 1500)], tracking_number="TRK-1")

    r = client.get(f"/v1/purchase-orders/{po.id}/pdf")
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.content.startswith(b"%PDF")
