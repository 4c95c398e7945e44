"""
Bon de commande PDF (une page : en-tête, lignes, total).
"""

from __future__ import annotations

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from backend.app.db.models.models_v1 import PurchaseOrder
from backend.services.formatting import format_amount


def _latin1(text) -> str:
    # polices standard FPDF : latin-1 uniquement
    return str(text if text is not None else "").encode("latin-1", "replace").decode("latin-1")


def _line(pdf: FPDF, text: str, size: int = 12, style: str = "", align: str = "L") -> None:
    pdf.set_font("Helvetica", style, size)
    pdf.cell(0, 8, _latin1(text), align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def render_purchase_order_pdf(order: PurchaseOrder) -> bytes:
    currency = order.currency.value
    pdf = FPDF()
    pdf.add_page()

    _line(pdf, "BON DE COMMANDE", size=16, style="B", align="C")
    pdf.ln(6)
    _line(pdf, f"Numéro : {order.order_number}")
    _line(pdf, f"Fournisseur : {order.supplier_name or '-'}")
    _line(pdf, f"Date de commande : {order.order_date.isoformat()}")
    if order.expected_delivery_date:
        _line(pdf, f"Livraison prévue : {order.expected_delivery_date.isoformat()}")
    if order.tracking_number:
        _line(pdf, f"Numéro de suivi : {order.tracking_number}")
    pdf.ln(4)

    widths = (80, 25, 40, 45)
    pdf.set_font("Helvetica", "B", 10)
    for w, head in zip(widths, ("Produit", "Qté", "Prix unitaire", "Total")):
        pdf.cell(w, 8, _latin1(head), border=1)
    pdf.ln()

    pdf.set_font("Helvetica", "", 10)
    for item in order.items:
        name = item.product.name if item.product else str(item.product_id)
        cells = (
            name[:40],
            str(item.quantity_ordered),
            format_amount(item.unit_price, currency),
            format_amount(item.total_price, currency),
        )
        for w, value in zip(widths, cells):
            pdf.cell(w, 8, _latin1(value), border=1)
        pdf.ln()

    pdf.ln(4)
    _line(pdf, f"Total : {format_amount(order.total_amount, currency)}", style="B")
    if order.notes:
        pdf.ln(4)
        _line(pdf, order.notes, size=10, style="I")

    return bytes(pdf.output())
