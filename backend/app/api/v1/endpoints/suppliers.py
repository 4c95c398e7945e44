from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.errors import commit_or_raise
from backend.app.core.config import SUPPLY_MODULE
from backend.app.db.models.models_v1 import Supplier

router = APIRouter(prefix="/suppliers")


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    contact_info: str | None = None


def build_contact_info(email: str | None, phone: str | None, other: str | None) -> str | None:
    """Email | Tél | texte libre, dans cet ordre."""
    parts = []
    if email and email.strip():
        parts.append(f"Email: {email.strip()}")
    if phone and phone.strip():
        parts.append(f"Tél: {phone.strip()}")
    if other and other.strip():
        parts.append(other.strip())
    return " | ".join(parts) or None


@router.get("")
def list_suppliers(module: str | None = None, db: Session = Depends(get_db)):
    rows = db.execute(select(Supplier).order_by(Supplier.name)).scalars().all()
    if module:
        # modules est un tableau JSON : filtrage côté Python
        rows = [s for s in rows if module in (s.modules or [])]
    return [
        {
            "id": s.id,
            "name": s.name,
            "contact_info": s.contact_info,
            "modules": s.modules or [],
        }
        for s in rows
    ]


@router.post("")
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Le nom du fournisseur est requis")

    exists = db.execute(select(Supplier).where(Supplier.name == name)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="Un fournisseur avec ce nom existe déjà")

    s = Supplier(
        name=name,
        contact_info=build_contact_info(payload.email, payload.phone, payload.contact_info),
        modules=[SUPPLY_MODULE],
    )
    db.add(s)
    commit_or_raise(db, "suppliers")
    db.refresh(s)
    return {"id": s.id, "name": s.name, "contact_info": s.contact_info, "modules": s.modules}
