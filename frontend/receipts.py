"""
Écran de réception d'une commande.

Les lignes sont pré-remplies par /receipt-draft (reste à recevoir, prix
plancher). Un changement de taux recalcule les prix restés au plancher ;
un prix saisi sous le plancher est remonté et signalé.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import streamlit as st

from backend.app.core.config import LOCAL_CURRENCY
from backend.services.pricing import (
    PricedLine,
    clamp_price,
    floor_price,
    reprice_on_rate_change,
    to_decimal,
)
from backend.services.purchasing import line_total
from frontend.ui import call, get_client, money_label


def _state_key(po_id: int) -> str:
    return f"receipt_{po_id}"


def _load_draft(po_id: int) -> dict | None:
    key = _state_key(po_id)
    if key not in st.session_state:
        draft = call(get_client().receipt_draft, po_id)
        if draft is None:
            return None
        st.session_state[key] = {"draft": draft, "rate": None}
    return st.session_state[key]


def apply_rate(lines: list[dict], old_rate, new_rate) -> list[dict]:
    """Recalcule les prix unitaires des lignes après changement de taux."""
    priced = [
        PricedLine(
            order_unit_price=to_decimal(ln["order_unit_price"]),
            unit_price=to_decimal(ln["unit_price"]),
            quantity=ln["quantity_received"],
        )
        for ln in lines
    ]
    for ln, pl in zip(lines, priced):
        share = to_decimal(ln["transit_cost"])
        reprice_on_rate_change([pl], old_rate, new_rate, share)
        ln["unit_price"] = float(pl.unit_price)
        # sans taux, pas de plancher en devise locale
        floor = floor_price(ln["order_unit_price"], new_rate, share) if new_rate else None
        ln["floor_price"] = float(floor) if floor is not None else None
    return lines


def render(po_id: int) -> None:
    state = _load_draft(po_id)
    if state is None:
        return
    draft = state["draft"]
    currency = draft["currency"]

    st.subheader(f"📥 Réception - {draft['order_number']}")
    if not draft["can_create_receipt"] or not draft["lines"]:
        st.error("Réception impossible pour cette commande")
        return

    c1, c2 = st.columns(2)
    receipt_date = c1.date_input("Date de réception", value=date.today())
    rate = None
    if currency != LOCAL_CURRENCY:
        entered = c2.number_input(
            f"Taux de change {currency} → {LOCAL_CURRENCY}",
            min_value=0.0,
            value=float(state["rate"] or 0),
            step=1.0,
        )
        rate = Decimal(str(entered)) if entered > 0 else None
        if rate != state["rate"]:
            apply_rate(draft["lines"], state["rate"], rate)
            state["rate"] = rate
    display_currency = LOCAL_CURRENCY if rate else currency

    selected: list[dict] = []
    adjusted_any = False
    for ln in draft["lines"]:
        pid = ln["purchase_order_item_id"]
        r1, r2, r3, r4, r5 = st.columns([3, 1, 1, 1, 1])
        keep = r1.checkbox(f"{ln['product_sku']} - {ln['product_name']}", value=True, key=f"keep_{pid}")
        qty = r2.number_input(
            f"Qté (max {ln['max_quantity']})",
            min_value=1,
            max_value=ln["max_quantity"],
            value=min(ln["quantity_received"], ln["max_quantity"]),
            key=f"rq_{pid}",
        )
        price = r3.number_input("Prix unitaire", min_value=0.0, value=float(ln["unit_price"]), key=f"rp_{pid}_{state['rate']}")
        effective, adjusted = clamp_price(price, ln["floor_price"])
        if adjusted:
            adjusted_any = True
            r3.caption(f"Plancher : {money_label(ln['floor_price'], display_currency)}")
        effective = effective if effective is not None else Decimal("0")
        r4.write(money_label(effective, display_currency))
        r5.write(money_label(line_total(qty, effective), display_currency))

        ln["quantity_received"] = int(qty)
        ln["unit_price"] = float(effective)
        if keep:
            selected.append(ln)

    if adjusted_any:
        st.warning("Certains prix étaient sous le prix plancher et ont été ajustés")

    total = sum((line_total(ln["quantity_received"], ln["unit_price"]) for ln in selected), Decimal("0"))
    st.metric("TOTAL RÉCEPTION", money_label(total, display_currency))
    notes = st.text_area("Notes")

    if st.button("✅ Valider la réception"):
        if not selected:
            st.error("Veuillez sélectionner au moins un article")
            return
        payload = {
            "purchase_order_id": po_id,
            "receipt_date": receipt_date.isoformat(),
            "exchange_rate": float(rate) if rate else None,
            "notes": notes.strip() or None,
            "items": [
                {
                    "purchase_order_item_id": ln["purchase_order_item_id"],
                    "quantity_received": ln["quantity_received"],
                    "unit_price": ln["unit_price"],
                }
                for ln in selected
            ],
        }
        receipt = call(get_client().create_receipt, payload)
        if receipt:
            st.session_state.pop(_state_key(po_id), None)
            st.success(f"Réception {receipt['receipt_number']} enregistrée")
            st.session_state["page"] = "detail"
            st.rerun()
