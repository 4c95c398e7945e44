from __future__ import annotations

import streamlit as st

from backend.services.formatting import format_amount
from frontend.client import ApiError, SupplyClient

STATUS_LABELS = {
    "draft": "Brouillon",
    "pending": "En attente",
    "ordered": "Commandée",
    "partial": "Partiellement reçue",
    "received": "Reçue",
    "cancelled": "Annulée",
}

ITEM_STATE_LABELS = {
    "pending": "En attente",
    "partial": "Partiel",
    "complete": "Complet",
}

TRACKING_STATUS_LABELS = {
    "pending": "En attente",
    "in_transit": "En transit",
    "arrived": "Arrivé",
    "received": "Réceptionné",
}


@st.cache_resource
def get_client() -> SupplyClient:
    return SupplyClient()


def call(fn, *args, **kwargs):
    """Appel API ; en cas d'échec, alerte bloquante et None."""
    try:
        return fn(*args, **kwargs)
    except ApiError as e:
        st.error(e.message)
        return None


def money_label(value, currency: str) -> str:
    return format_amount(value, currency)


def progress_widget(progress: dict | None) -> None:
    if not progress:
        st.caption("Pas de date de livraison prévue")
        return
    st.progress(int(progress["percentage"]) / 100, text=f"{progress['title']} · {progress['label']}")
    if progress["status"] == "overdue":
        st.error(progress["label"])
    elif progress["status"] == "warning":
        st.warning(progress["label"])
