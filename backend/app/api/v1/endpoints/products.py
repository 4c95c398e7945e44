from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.errors import commit_or_raise, raise_db_error
from backend.app.db.models.models_v1 import Category, Product, Supplier
from backend.app.db.models.core_types import ProductStatus
from backend.services.sku import generate_sku

router = APIRouter(prefix="/products")


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    sku: str | None = Field(default=None, max_length=64)
    unit: str = Field(default="pièce", min_length=1, max_length=32)
    min_stock_level: int = Field(default=0, ge=0)
    barcode: str | None = Field(default=None, max_length=64)
    category_id: int | None = None
    supplier_id: int | None = None


def product_out(p: Product) -> dict:
    return {
        "id": p.id,
        "sku": p.sku,
        "name": p.name,
        "description": p.description,
        "unit": p.unit,
        "barcode": p.barcode,
        "min_stock_level": p.min_stock_level,
        "current_stock": p.current_stock,
        "reserved_stock": p.reserved_stock,
        "available_stock": p.current_stock - p.reserved_stock,
        "category_id": p.category_id,
        "supplier_id": p.supplier_id,
        "status": p.status,
    }


@router.get("")
def list_products(search: str | None = None, db: Session = Depends(get_db)):
    stmt = select(Product).order_by(Product.name)
    if search:
        term = f"%{search.strip()}%"
        stmt = stmt.where(or_(Product.name.ilike(term), Product.sku.ilike(term)))

    rows = db.execute(stmt).scalars().all()
    return [product_out(p) for p in rows]


@router.get("/next-sku")
def next_sku(name: str, db: Session = Depends(get_db)):
    try:
        return {"sku": generate_sku(db, name)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("")
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Le nom du produit est requis")

    sku = (payload.sku or "").strip()
    if sku:
        exists = db.execute(select(Product).where(Product.sku == sku)).scalar_one_or_none()
        if exists:
            raise HTTPException(status_code=409, detail="Un produit avec ce SKU existe déjà")
    else:
        try:
            sku = generate_sku(db, name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    # FK checks (fail fast, message clair)
    if payload.category_id is not None and not db.get(Category, payload.category_id):
        raise HTTPException(status_code=400, detail="Catégorie ou fournisseur invalide")
    if payload.supplier_id is not None and not db.get(Supplier, payload.supplier_id):
        raise HTTPException(status_code=400, detail="Catégorie ou fournisseur invalide")

    p = Product(
        name=name,
        description=(payload.description or "").strip() or None,
        sku=sku,
        unit=payload.unit,
        min_stock_level=payload.min_stock_level,
        current_stock=0,
        reserved_stock=0,
        barcode=(payload.barcode or "").strip() or None,
        category_id=payload.category_id,
        supplier_id=payload.supplier_id,
        status=ProductStatus.active,
    )
    db.add(p)
    try:
        db.flush()
    except IntegrityError as e:
        raise_db_error(db, e, "products")
    commit_or_raise(db, "products")
    db.refresh(p)

    return product_out(p)
