from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from backend.app.api.deps import get_db
from backend.app.api.errors import commit_or_raise, raise_db_error
from backend.app.db.models.models_v1 import (
    PurchaseOrder,
    PurchaseOrderItem,
    Receipt,
    ReceiptItem,
)
from backend.app.schemas.receipt import ReceiptRead
from backend.services import purchasing
from backend.services.purchasing import PurchasingError, ReceiptLineInput

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/receipts")


class ReceiptItemCreate(BaseModel):
    purchase_order_item_id: int
    quantity_received: int = Field(gt=0)
    unit_price: Decimal | None = Field(default=None, ge=0)
    batch_number: str | None = Field(default=None, max_length=64)
    expiry_date: date | None = None
    notes: str | None = None


class ReceiptCreate(BaseModel):
    purchase_order_id: int
    receipt_date: date = Field(default_factory=date.today)
    exchange_rate: Decimal | None = Field(default=None, gt=0)
    notes: str | None = None
    items: list[ReceiptItemCreate] = Field(default_factory=list)


def _load_receipt(db: Session, receipt_id: int) -> Receipt:
    r = db.execute(
        select(Receipt)
        .where(Receipt.id == receipt_id)
        .options(selectinload(Receipt.items).selectinload(ReceiptItem.product))
    ).scalar_one_or_none()
    if not r:
        raise HTTPException(status_code=404, detail="Réception introuvable")
    return r


def receipt_out(r: Receipt) -> ReceiptRead:
    return ReceiptRead.model_validate(
        {
            "id": r.id,
            "receipt_number": r.receipt_number,
            "purchase_order_id": r.purchase_order_id,
            "supplier_id": r.supplier_id,
            "supplier_name": r.supplier_name,
            "receipt_date": r.receipt_date,
            "currency": r.currency,
            "exchange_rate": r.exchange_rate,
            "total_amount": r.total_amount,
            "notes": r.notes,
            "items": [
                {
                    "id": it.id,
                    "purchase_order_item_id": it.purchase_order_item_id,
                    "product_id": it.product_id,
                    "product_name": it.product.name if it.product else "",
                    "quantity_received": it.quantity_received,
                    "unit_price": it.unit_price,
                    "transit_cost": it.transit_cost,
                    "total_price": it.total_price,
                    "price_adjusted": it.price_adjusted,
                    "batch_number": it.batch_number,
                    "expiry_date": it.expiry_date,
                    "notes": it.notes,
                }
                for it in r.items
            ],
        }
    )


@router.get("", response_model=list[ReceiptRead])
def list_receipts(purchase_order_id: int | None = None, db: Session = Depends(get_db)):
    stmt = (
        select(Receipt)
        .options(selectinload(Receipt.items).selectinload(ReceiptItem.product))
        .order_by(Receipt.receipt_date.desc(), Receipt.id.desc())
    )
    if purchase_order_id is not None:
        stmt = stmt.where(Receipt.purchase_order_id == purchase_order_id)
    return [receipt_out(r) for r in db.execute(stmt).scalars().all()]


@router.get("/{receipt_id}", response_model=ReceiptRead)
def get_receipt(receipt_id: int, db: Session = Depends(get_db)):
    return receipt_out(_load_receipt(db, receipt_id))


@router.post("", response_model=ReceiptRead)
def create_receipt(payload: ReceiptCreate, db: Session = Depends(get_db)):
    po = db.execute(
        select(PurchaseOrder)
        .where(PurchaseOrder.id == payload.purchase_order_id)
        .options(selectinload(PurchaseOrder.items).selectinload(PurchaseOrderItem.product))
    ).scalar_one_or_none()
    if not po:
        raise HTTPException(status_code=404, detail="Commande introuvable")

    lines = [
        ReceiptLineInput(
            purchase_order_item_id=ln.purchase_order_item_id,
            quantity_received=ln.quantity_received,
            unit_price=ln.unit_price,
            batch_number=(ln.batch_number or "").strip() or None,
            expiry_date=ln.expiry_date,
            notes=(ln.notes or "").strip() or None,
        )
        for ln in payload.items
    ]

    try:
        receipt = purchasing.create_receipt(
            db,
            po,
            receipt_date=payload.receipt_date,
            lines=lines,
            exchange_rate=payload.exchange_rate,
            notes=(payload.notes or "").strip() or None,
        )
    except PurchasingError as e:
        logger.warning("receipt refused for order %s: %s", po.order_number, e)
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError as e:
        raise_db_error(db, e, "receipts")

    commit_or_raise(db, "receipts")
    return receipt_out(_load_receipt(db, receipt.id))
