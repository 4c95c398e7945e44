"""
Écrans commandes fournisseurs : liste, saisie / modification, détail.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pandas as pd
import streamlit as st

from backend.app.core.config import CURRENCIES, LOCAL_CURRENCY
from backend.services.purchasing import line_total
from frontend.ui import (
    ITEM_STATE_LABELS,
    STATUS_LABELS,
    call,
    get_client,
    money_label,
    progress_widget,
)

# transitions proposées à l'utilisateur (le serveur tranche)
STATUS_ACTIONS = {
    "draft": [("pending", "Mettre en attente"), ("ordered", "Passer commande"), ("cancelled", "Annuler")],
    "pending": [("draft", "Repasser en brouillon"), ("ordered", "Passer commande"), ("cancelled", "Annuler")],
    "ordered": [("cancelled", "Annuler")],
}


def _lines_frame(items: list[dict]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Produit": f"{i['product_sku']} - {i['product_name']}",
                "Commandé": i["quantity_ordered"],
                "Reçu": i["quantity_received"],
                "Prix unitaire": i["unit_price"],
                "Total": i["total_price"],
                "État": ITEM_STATE_LABELS.get(i["state"], i["state"]),
            }
            for i in items
        ]
    )


# ---------- LISTE ----------
def render_list() -> None:
    client = get_client()
    st.subheader("📋 Commandes fournisseurs")

    c1, c2 = st.columns([3, 1])
    search = c1.text_input("Rechercher (numéro, fournisseur)")
    status = c2.selectbox(
        "Statut",
        [None, *STATUS_LABELS],
        format_func=lambda s: "Tous" if s is None else STATUS_LABELS[s],
    )

    orders = call(client.list_orders, search=search, status=status) or []
    if not orders:
        st.info("Aucune commande")
        return

    df = pd.DataFrame(
        [
            {
                "ID": o["id"],
                "Numéro": o["order_number"],
                "Fournisseur": o["supplier_name"] or "-",
                "Statut": STATUS_LABELS.get(o["status"], o["status"]),
                "Date": o["order_date"],
                "Livraison prévue": o["expected_delivery_date"],
                "Échéance": (o["progress"] or {}).get("short_label", "-"),
                "Total": money_label(o["total_amount"], o["currency"]),
                "Suivi": o["tracking_number"] or "",
            }
            for o in orders
        ]
    )
    st.dataframe(df, use_container_width=True, hide_index=True)

    selected = st.selectbox(
        "Ouvrir une commande",
        [o["id"] for o in orders],
        format_func=lambda oid: next(o["order_number"] for o in orders if o["id"] == oid),
    )
    if st.button("Voir le détail"):
        st.session_state["po_id"] = selected
        st.session_state["page"] = "detail"
        st.rerun()


# ---------- SAISIE ----------
def _init_form(order: dict | None) -> None:
    key = order["id"] if order else "new"
    if st.session_state.get("po_form_key") == key:
        return
    st.session_state["po_form_key"] = key
    st.session_state["po_lines"] = [
        {
            "product_id": i["product_id"],
            "quantity_ordered": i["quantity_ordered"],
            "unit_price": i["unit_price"],
        }
        for i in (order["items"] if order else [])
    ]


def render_form(order: dict | None = None) -> None:
    client = get_client()
    st.subheader("✏️ Modifier la commande" if order else "🆕 Nouvelle commande")
    _init_form(order)

    suppliers = call(client.list_suppliers) or []
    products = call(client.list_products) or []
    product_names = {p["id"]: f"{p['sku']} - {p['name']}" for p in products}

    supplier_ids = [None, *(s["id"] for s in suppliers)]
    supplier_names = {s["id"]: s["name"] for s in suppliers}
    current_supplier = order["supplier_id"] if order else None

    c1, c2, c3 = st.columns(3)
    supplier_id = c1.selectbox(
        "Fournisseur",
        supplier_ids,
        index=supplier_ids.index(current_supplier) if current_supplier in supplier_ids else 0,
        format_func=lambda sid: "-" if sid is None else supplier_names[sid],
    )
    order_date = c2.date_input("Date de commande", value=date.fromisoformat(order["order_date"]) if order else date.today())
    expected = c3.date_input(
        "Livraison prévue",
        value=date.fromisoformat(order["expected_delivery_date"]) if order and order["expected_delivery_date"] else None,
    )

    c4, c5 = st.columns(2)
    currency = c4.selectbox(
        "Devise",
        CURRENCIES,
        index=CURRENCIES.index(order["currency"]) if order else CURRENCIES.index(LOCAL_CURRENCY),
    )
    tracking = c5.text_input("Numéro de suivi", value=(order or {}).get("tracking_number") or "")
    notes = st.text_area("Notes", value=(order or {}).get("notes") or "")

    # --- Articles ---
    st.markdown("#### Articles")
    lines = st.session_state["po_lines"]
    with st.form("add_line", clear_on_submit=True):
        a1, a2, a3 = st.columns([3, 1, 1])
        product_id = a1.selectbox("Produit", list(product_names), format_func=lambda pid: product_names[pid])
        qty = a2.number_input("Quantité", min_value=1, value=1, step=1)
        price = a3.number_input("Prix unitaire", min_value=0.0, value=0.0, step=100.0)
        if st.form_submit_button("Ajouter l'article") and product_id is not None:
            if any(ln["product_id"] == product_id for ln in lines):
                st.error("Ce produit est déjà dans la commande")
            else:
                lines.append({"product_id": product_id, "quantity_ordered": int(qty), "unit_price": float(price)})

    for idx, ln in enumerate(list(lines)):
        r1, r2, r3, r4, r5 = st.columns([3, 1, 1, 1, 1])
        r1.write(product_names.get(ln["product_id"], ln["product_id"]))
        ln["quantity_ordered"] = int(r2.number_input("Qté", min_value=1, value=ln["quantity_ordered"], key=f"q_{idx}"))
        ln["unit_price"] = float(r3.number_input("Prix", min_value=0.0, value=float(ln["unit_price"]), key=f"p_{idx}"))
        r4.write(money_label(line_total(ln["quantity_ordered"], ln["unit_price"]), currency))
        if r5.button("🗑️", key=f"del_{idx}"):
            lines.pop(idx)
            st.rerun()

    total = sum((line_total(ln["quantity_ordered"], ln["unit_price"]) for ln in lines), Decimal("0"))
    st.metric("TOTAL COMMANDE", money_label(total, currency))

    if st.button("💾 Enregistrer"):
        if not lines:
            st.error("Veuillez ajouter au moins un article à la commande")
            return
        payload = {
            "supplier_id": supplier_id,
            "order_date": order_date.isoformat(),
            "expected_delivery_date": expected.isoformat() if expected else None,
            "currency": currency,
            "tracking_number": tracking.strip() or None,
            "notes": notes.strip() or None,
            "items": lines,
        }
        if order:
            saved = call(client.update_order, order["id"], payload)
        else:
            saved = call(client.create_order, payload)
        if saved:
            st.success(f"Commande {saved['order_number']} enregistrée")
            st.session_state.pop("po_form_key", None)
            st.session_state["po_id"] = saved["id"]
            st.session_state["page"] = "detail"
            st.rerun()


# ---------- DÉTAIL ----------
def render_detail(po_id: int) -> None:
    client = get_client()
    order = call(client.get_order, po_id)
    if not order:
        return

    st.subheader(f"📦 {order['order_number']}")
    c1, c2, c3 = st.columns(3)
    c1.metric("STATUT", STATUS_LABELS.get(order["status"], order["status"]))
    c2.metric("FOURNISSEUR", order["supplier_name"] or "-")
    c3.metric("TOTAL", money_label(order["total_amount"], order["currency"]))
    progress_widget(order["progress"])
    if order["tracking_number"]:
        st.caption(f"Numéro de suivi : {order['tracking_number']}")

    st.dataframe(_lines_frame(order["items"]), use_container_width=True, hide_index=True)

    # --- Actions ---
    actions = STATUS_ACTIONS.get(order["status"], [])
    if actions:
        cols = st.columns(len(actions))
        for col, (target, label) in zip(cols, actions):
            if col.button(label, key=f"status_{target}"):
                if call(client.change_status, po_id, target):
                    st.rerun()

    b1, b2, b3 = st.columns(3)
    if order["can_edit"] and b1.button("✏️ Modifier"):
        st.session_state["page"] = "edit"
        st.rerun()
    if order["can_create_receipt"] and b2.button("📥 Réceptionner"):
        st.session_state["page"] = "receipt"
        st.rerun()
    pdf = call(client.order_pdf, po_id)
    if pdf:
        b3.download_button(
            label="📄 Bon de commande PDF",
            data=pdf,
            file_name=f"{order['order_number']}.pdf",
            mime="application/pdf",
        )

    if order["can_add_products"] and not order["can_edit"]:
        with st.expander("➕ Ajouter un produit"):
            products = call(client.list_products) or []
            present = {i["product_id"] for i in order["items"]}
            choices = {p["id"]: f"{p['sku']} - {p['name']}" for p in products if p["id"] not in present}
            with st.form("add_item"):
                pid = st.selectbox("Produit", list(choices), format_func=lambda x: choices[x])
                qty = st.number_input("Quantité", min_value=1, value=1, step=1)
                price = st.number_input("Prix unitaire", min_value=0.0, value=0.0, step=100.0)
                if st.form_submit_button("Ajouter") and pid is not None:
                    payload = {"product_id": pid, "quantity_ordered": int(qty), "unit_price": float(price)}
                    if call(client.add_order_item, po_id, payload):
                        st.rerun()

    receipts = call(client.list_receipts, purchase_order_id=po_id) or []
    if receipts:
        st.markdown("#### Réceptions")
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Numéro": r["receipt_number"],
                        "Date": r["receipt_date"],
                        "Lignes": len(r["items"]),
                        "Total": money_label(
                            r["total_amount"],
                            r["currency"],
                        ),
                    }
                    for r in receipts
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )
