from datetime import date


def test_create_product_generates_sku(client, category, supplier):
    r = client.post(
        "/v1/products",
        json={"name": "Riz parfumé", "category_id": category.id, "supplier_id": supplier.id},
    )
    assert r.status_code == 200, r.text
    data = r.json()

    assert data["sku"] == f"RIZ-{date.today().strftime('%y%m%d')}-00001"
    assert data["unit"] == "pièce"
    assert data["current_stock"] == 0

    r = client.get("/v1/products/next-sku", params={"name": "Riz rouge"})
    assert r.json()["sku"].endswith("-00002")


def test_duplicate_sku_conflicts(client):
    assert client.post("/v1/products", json={"name": "Huile", "sku": "HUI-1"}).status_code == 200

    r = client.post("/v1/products", json={"name": "Huile 2", "sku": "HUI-1"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Un produit avec ce SKU existe déjà"


def test_duplicate_barcode_goes_through_db_mapping(client):
    assert client.post("/v1/products", json={"name": "Sucre", "barcode": "123"}).status_code == 200

    r = client.post("/v1/products", json={"name": "Sucre roux", "barcode": "123"})
    assert r.status_code == 409


def test_product_with_unknown_category(client):
    r = client.post("/v1/products", json={"name": "Farine", "category_id": 999})
    assert r.status_code == 400
    assert r.json()["detail"] == "Catégorie ou fournisseur invalide"


def test_next_sku_needs_three_characters(client):
    assert client.get("/v1/products/next-sku", params={"name": "ab"}).status_code == 400


def test_product_search(client, products):
    found = client.get("/v1/products", params={"search": "huile"}).json()
    assert [p["name"] for p in found] == ["Huile"]


def test_create_supplier_with_contact(client):
    r = client.post(
        "/v1/suppliers",
        json={"name": "Sino Trade", "email": "sales@sino.cn", "phone": "+86 20 1234", "contact_info": "Guangzhou"},
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["contact_info"] == "Email: sales@sino.cn | Tél: +86 20 1234 | Guangzhou"
    assert data["modules"] == ["stock"]

    assert client.post("/v1/suppliers", json={"name": "Sino Trade"}).status_code == 409


def test_supplier_module_filter(client, db_session):
    from backend.app.db.models.models_v1 import Supplier

    db_session.add_all([Supplier(name="A", modules=["stock"]), Supplier(name="B", modules=["tiktok"])])
    db_session.commit()

    assert [s["name"] for s in client.get("/v1/suppliers", params={"module": "stock"}).json()] == ["A"]
    assert len(client.get("/v1/suppliers").json()) == 2


def test_duplicate_category(client):
    assert client.post("/v1/categories", json={"name": "Épicerie"}).status_code == 200

    r = client.post("/v1/categories", json={"name": "Épicerie"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Une catégorie avec ce nom existe déjà"
    assert [c["name"] for c in client.get("/v1/categories", params={"module": "stock"}).json()] == ["Épicerie"]
