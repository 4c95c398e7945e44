from __future__ import annotations

import pandas as pd
import streamlit as st

from backend.app.core.config import LOCAL_CURRENCY
from frontend.ui import TRACKING_STATUS_LABELS, call, get_client, money_label

EDITABLE = ("length", "width", "height", "weight_kg", "rate_per_m3", "rate_per_kg", "exchange_rate_mga")
LABELS = {
    "length": "Longueur (cm)",
    "width": "Largeur (cm)",
    "height": "Hauteur (cm)",
    "weight_kg": "Poids (kg)",
    "rate_per_m3": "Tarif USD / m³",
    "rate_per_kg": "Tarif USD / kg",
    "exchange_rate_mga": "Taux USD → MGA",
}


def render() -> None:
    client = get_client()
    st.subheader("🚢 Numéros de suivi")

    c1, c2 = st.columns([3, 1])
    search = c1.text_input("Rechercher un numéro")
    if c2.button("🔄 Synchroniser"):
        result = call(client.sync_tracking_numbers)
        if result is not None:
            st.success(f"{result['created']} numéro(s) ajouté(s)")

    rows = call(client.list_tracking_numbers, search=search) or []
    if not rows:
        st.info("Aucun numéro de suivi")
        return

    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Numéro": t["tracking_number"],
                    "Statut": TRACKING_STATUS_LABELS.get(t["status"], t["status"]),
                    "Commandes": t["order_count"],
                    "Articles": t["item_count"],
                    "Volume (m³)": round(t["volume_m3"], 4),
                    "Coût USD": round(t["total_cost_usd"], 2),
                    "Coût": money_label(t["total_cost_mga"], LOCAL_CURRENCY),
                    "Quote-part / article": money_label(t["transit_share"], LOCAL_CURRENCY),
                }
                for t in rows
            ]
        ),
        use_container_width=True,
        hide_index=True,
    )

    by_id = {t["id"]: t for t in rows}
    tracking_id = st.selectbox("Modifier", list(by_id), format_func=lambda i: by_id[i]["tracking_number"])
    current = by_id[tracking_id]
    with st.form(f"tracking_{tracking_id}"):
        cols = st.columns(4)
        values = {}
        for idx, field in enumerate(EDITABLE):
            values[field] = cols[idx % 4].number_input(
                LABELS[field], min_value=0.0, value=float(current[field] or 0), key=f"{field}_{tracking_id}"
            )
        statuses = list(TRACKING_STATUS_LABELS)
        status = st.selectbox(
            "Statut",
            statuses,
            index=statuses.index(current["status"]),
            format_func=lambda s: TRACKING_STATUS_LABELS[s],
        )
        notes = st.text_area("Notes", value=current["notes"] or "")
        save = st.form_submit_button("💾 Enregistrer")
        delete = st.form_submit_button("🗑️ Supprimer")

    if save:
        payload = {k: (v or None) for k, v in values.items()}
        payload.update(status=status, notes=notes.strip() or None)
        if call(client.update_tracking_number, tracking_id, payload):
            st.success("Numéro de suivi mis à jour")
            st.rerun()
    if delete and call(client.delete_tracking_number, tracking_id) is not None:
        st.rerun()
