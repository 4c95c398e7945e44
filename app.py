import streamlit as st

from backend.app.core.config import SUPPLY_API_URL, configure_logging
from frontend import orders, receipts, referentials, tracking
from frontend.ui import call, get_client

configure_logging()

# --- CONFIGURATION & DESIGN ---
st.set_page_config(page_title="SUPPLY DESK - APPROVISIONNEMENT", layout="wide", page_icon="📦")

st.markdown("""
    <style>
    .stMetric {
        background-color: #1e2130;
        padding: 15px;
        border-radius: 10px;
        border-left: 5px solid #00ffcc;
    }
    h1 {
        color: #00ffcc;
    }
    .stButton>button {
        width: 100%;
        border-radius: 5px;
        font-weight: bold;
    }
    </style>
    """, unsafe_allow_html=True)

SECTIONS = {
    "orders": "📋 Commandes",
    "new": "🆕 Nouvelle commande",
    "tracking": "🚢 Suivi des colis",
    "referentials": "🗂️ Référentiels",
}

st.title("📦 SUPPLY DESK")

with st.sidebar:
    st.header("NAVIGATION")
    section = st.radio("Section", list(SECTIONS), format_func=lambda s: SECTIONS[s])
    if st.session_state.get("section") != section:
        # changement de section : retour à l'écran principal
        st.session_state["section"] = section
        st.session_state["page"] = None
    st.divider()
    st.caption(f"API : {SUPPLY_API_URL}")
    if call(get_client().health) is not None:
        st.success("✅ Service disponible")

page = st.session_state.get("page")
po_id = st.session_state.get("po_id")

if page == "detail" and po_id:
    if st.button("← Retour à la liste"):
        st.session_state["page"] = None
        st.rerun()
    orders.render_detail(po_id)
elif page == "edit" and po_id:
    order = call(get_client().get_order, po_id)
    if order:
        orders.render_form(order)
elif page == "receipt" and po_id:
    if st.button("← Retour à la commande"):
        st.session_state["page"] = "detail"
        st.rerun()
    receipts.render(po_id)
elif section == "orders":
    orders.render_list()
elif section == "new":
    orders.render_form()
elif section == "tracking":
    tracking.render()
else:
    referentials.render()
