from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.errors import commit_or_raise
from backend.app.core.config import SUPPLY_MODULE
from backend.app.db.models.models_v1 import Category

router = APIRouter(prefix="/categories")


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None


@router.get("")
def list_categories(module: str | None = None, db: Session = Depends(get_db)):
    rows = db.execute(select(Category).order_by(Category.name)).scalars().all()
    if module:
        rows = [c for c in rows if module in (c.modules or [])]
    return [
        {"id": c.id, "name": c.name, "description": c.description, "modules": c.modules or []}
        for c in rows
    ]


@router.post("")
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Le nom de la catégorie est requis")

    c = Category(
        name=name,
        description=(payload.description or "").strip() or None,
        modules=[SUPPLY_MODULE],
    )
    db.add(c)
    commit_or_raise(db, "categories")
    db.refresh(c)
    return {"id": c.id, "name": c.name, "description": c.description, "modules": c.modules}
