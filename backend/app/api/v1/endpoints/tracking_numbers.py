from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.errors import commit_or_raise
from backend.app.db.models.models_v1 import TrackingNumber
from backend.app.db.models.core_types import TrackingStatus
from backend.app.schemas.tracking_number import TrackingNumberRead
from backend.services.pricing import transit_share
from backend.services.tracking import (
    count_items_sharing,
    order_counts,
    shipment_cost_for,
    sync_tracking_numbers,
)

router = APIRouter(prefix="/tracking-numbers")


class TrackingNumberUpdate(BaseModel):
    length: Decimal | None = Field(default=None, ge=0)
    width: Decimal | None = Field(default=None, ge=0)
    height: Decimal | None = Field(default=None, ge=0)
    weight_kg: Decimal | None = Field(default=None, ge=0)
    rate_per_m3: Decimal | None = Field(default=None, ge=0)
    rate_per_kg: Decimal | None = Field(default=None, ge=0)
    exchange_rate_mga: Decimal | None = Field(default=None, gt=0)
    status: TrackingStatus | None = None
    notes: str | None = None


def tracking_out(db: Session, tn: TrackingNumber, counts: dict[str, int] | None = None) -> TrackingNumberRead:
    counts = counts if counts is not None else order_counts(db)
    cost = shipment_cost_for(tn)
    items = count_items_sharing(db, tn.tracking_number)

    out = TrackingNumberRead.model_validate(tn)
    out.order_count = counts.get(tn.tracking_number) or 1
    out.item_count = items
    out.volume_m3 = float(cost.volume_m3)
    out.total_cost_usd = float(cost.total_cost_usd)
    out.total_cost_mga = float(cost.total_cost_mga)
    out.transit_share = float(transit_share(cost.total_cost_mga, items))
    return out


def _get(db: Session, tracking_id: int) -> TrackingNumber:
    tn = db.get(TrackingNumber, tracking_id)
    if not tn:
        raise HTTPException(status_code=404, detail="Numéro de suivi introuvable")
    return tn


@router.post("/sync")
def sync(db: Session = Depends(get_db)):
    created = sync_tracking_numbers(db)
    commit_or_raise(db, "tracking_numbers")
    return {"created": len(created)}


@router.get("", response_model=list[TrackingNumberRead])
def list_tracking_numbers(
    search: str | None = None,
    status: TrackingStatus | None = None,
    db: Session = Depends(get_db),
):
    stmt = select(TrackingNumber).order_by(TrackingNumber.created_at.desc(), TrackingNumber.id.desc())
    if search:
        stmt = stmt.where(TrackingNumber.tracking_number.ilike(f"%{search.strip()}%"))
    if status is not None:
        stmt = stmt.where(TrackingNumber.status == status)

    counts = order_counts(db)
    return [tracking_out(db, tn, counts) for tn in db.execute(stmt).scalars().all()]


@router.get("/{tracking_id}", response_model=TrackingNumberRead)
def get_tracking_number(tracking_id: int, db: Session = Depends(get_db)):
    return tracking_out(db, _get(db, tracking_id))


@router.put("/{tracking_id}", response_model=TrackingNumberRead)
def update_tracking_number(tracking_id: int, payload: TrackingNumberUpdate, db: Session = Depends(get_db)):
    tn = _get(db, tracking_id)

    # seuls les champs envoyés sont modifiés ; null efface la valeur
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "status":
            if value is None:
                continue
        elif field == "notes":
            value = (value or "").strip() or None
        setattr(tn, field, value)

    commit_or_raise(db, "tracking_numbers")
    db.refresh(tn)
    return tracking_out(db, tn)


@router.delete("/{tracking_id}")
def delete_tracking_number(tracking_id: int, db: Session = Depends(get_db)):
    tn = _get(db, tracking_id)
    db.delete(tn)
    commit_or_raise(db, "tracking_numbers")
    return {"ok": True}
