"""
Création rapide : produit, fournisseur, catégorie.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from frontend.ui import call, get_client


def _product_form(client) -> None:
    categories = call(client.list_categories) or []
    suppliers = call(client.list_suppliers) or []
    cat_names = {c["id"]: c["name"] for c in categories}
    sup_names = {s["id"]: s["name"] for s in suppliers}

    with st.form("new_product", clear_on_submit=True):
        name = st.text_input("Nom du produit")
        c1, c2 = st.columns(2)
        sku = c1.text_input("SKU (vide = automatique)")
        barcode = c2.text_input("Code-barres")
        c3, c4 = st.columns(2)
        unit = c3.text_input("Unité", value="pièce")
        min_stock = c4.number_input("Stock minimum", min_value=0, value=0, step=1)
        category_id = st.selectbox("Catégorie", [None, *cat_names], format_func=lambda i: "-" if i is None else cat_names[i])
        supplier_id = st.selectbox("Fournisseur", [None, *sup_names], format_func=lambda i: "-" if i is None else sup_names[i])
        description = st.text_area("Description")
        if st.form_submit_button("Créer le produit"):
            if not name.strip():
                st.error("Le nom du produit est requis")
                return
            payload = {
                "name": name.strip(),
                "sku": sku.strip() or None,
                "barcode": barcode.strip() or None,
                "unit": unit.strip() or "pièce",
                "min_stock_level": int(min_stock),
                "category_id": category_id,
                "supplier_id": supplier_id,
                "description": description.strip() or None,
            }
            product = call(client.create_product, payload)
            if product:
                st.success(f"Produit {product['sku']} créé")

    name_hint = st.text_input("Aperçu du SKU pour un nom")
    if name_hint.strip():
        sku = call(client.next_sku, name_hint.strip())
        if sku:
            st.code(sku)


def _supplier_form(client) -> None:
    with st.form("new_supplier", clear_on_submit=True):
        name = st.text_input("Nom du fournisseur")
        c1, c2 = st.columns(2)
        email = c1.text_input("Email")
        phone = c2.text_input("Téléphone")
        other = st.text_area("Autres informations")
        if st.form_submit_button("Créer le fournisseur"):
            if not name.strip():
                st.error("Le nom du fournisseur est requis")
                return
            supplier = call(
                client.create_supplier,
                {"name": name.strip(), "email": email or None, "phone": phone or None, "contact_info": other or None},
            )
            if supplier:
                st.success(f"Fournisseur {supplier['name']} créé")


def _category_form(client) -> None:
    with st.form("new_category", clear_on_submit=True):
        name = st.text_input("Nom de la catégorie")
        description = st.text_area("Description")
        if st.form_submit_button("Créer la catégorie"):
            if not name.strip():
                st.error("Le nom de la catégorie est requis")
                return
            category = call(client.create_category, {"name": name.strip(), "description": description or None})
            if category:
                st.success(f"Catégorie {category['name']} créée")


def render() -> None:
    client = get_client()
    st.subheader("🗂️ Référentiels")
    tab_p, tab_s, tab_c = st.tabs(["Produits", "Fournisseurs", "Catégories"])

    with tab_p:
        _product_form(client)
        products = call(client.list_products) or []
        if products:
            df = pd.DataFrame(products)[["sku", "name", "unit", "current_stock", "min_stock_level", "status"]]
            st.dataframe(df, use_container_width=True, hide_index=True)
    with tab_s:
        _supplier_form(client)
        suppliers = call(client.list_suppliers) or []
        if suppliers:
            st.dataframe(pd.DataFrame(suppliers)[["name", "contact_info"]], use_container_width=True, hide_index=True)
    with tab_c:
        _category_form(client)
        categories = call(client.list_categories) or []
        if categories:
            st.dataframe(pd.DataFrame(categories)[["name", "description"]], use_container_width=True, hide_index=True)
