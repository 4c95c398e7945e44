from backend.app.db.models.core_types import Currency
from backend.services.documents import render_purchase_order_pdf


def test_purchase_order_pdf(db_session, products, make_order):
    po = make_order(
        [(products[0], 12, 1500), (products[1], 3, "2000.50")],
        currency=Currency.eur,
        tracking_number="TRK-PDF",
    )
    po.notes = "Livraison au dépôt → quai 2"

    content = render_purchase_order_pdf(po)

    assert isinstance(content, bytes)
    assert content.startswith(b"%PDF")
