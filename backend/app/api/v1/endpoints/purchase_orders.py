from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from backend.app.api.deps import get_db
from backend.app.api.errors import commit_or_raise, raise_db_error
from backend.app.db.models.models_v1 import (
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    Product,
)
from backend.app.db.models.core_types import Currency, POStatus
from backend.services.delivery import compute_progress
from backend.services.documents import render_purchase_order_pdf
from backend.services import purchasing
from backend.services.purchasing import PurchasingError

router = APIRouter(prefix="/purchase-orders")


class POItemCreate(BaseModel):
    product_id: int
    quantity_ordered: int = Field(default=1, gt=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str | None = None


class POCreate(BaseModel):
    order_number: str | None = Field(default=None, max_length=64)
    supplier_id: int | None = None
    order_date: date = Field(default_factory=date.today)
    expected_delivery_date: date | None = None
    currency: Currency = Currency.mga
    tracking_number: str | None = Field(default=None, max_length=128)
    notes: str | None = None
    items: list[POItemCreate] = Field(default_factory=list)


class POStatusUpdate(BaseModel):
    status: POStatus


# ---------- Helpers ----------
def _get_order(db: Session, po_id: int) -> PurchaseOrder:
    po = db.execute(
        select(PurchaseOrder)
        .where(PurchaseOrder.id == po_id)
        .options(selectinload(PurchaseOrder.items).selectinload(PurchaseOrderItem.product))
    ).scalar_one_or_none()
    if not po:
        raise HTTPException(status_code=404, detail="Commande introuvable")
    return po


def _progress_out(po: PurchaseOrder) -> dict | None:
    progress = compute_progress(po.order_date, po.expected_delivery_date)
    if progress is None:
        return None
    return {
        "total_days": progress.total_days,
        "days_elapsed": progress.days_elapsed,
        "days_remaining": progress.days_remaining,
        "percentage": progress.percentage,
        "status": progress.status,
        "title": progress.title,
        "label": progress.label,
        "short_label": progress.short_label,
    }


def _item_out(item: PurchaseOrderItem) -> dict:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": item.product.name if item.product else "",
        "product_sku": item.product.sku if item.product else "",
        "quantity_ordered": item.quantity_ordered,
        "quantity_received": item.quantity_received,
        "unit_price": float(item.unit_price),
        "total_price": float(item.total_price),
        "notes": item.notes,
        "state": purchasing.item_receipt_state(item),
    }


def order_out(po: PurchaseOrder, with_items: bool = True) -> dict:
    out = {
        "id": po.id,
        "order_number": po.order_number,
        "supplier_id": po.supplier_id,
        "supplier_name": po.supplier_name,
        "status": po.status,
        "order_date": po.order_date,
        "expected_delivery_date": po.expected_delivery_date,
        "currency": po.currency,
        "tracking_number": po.tracking_number,
        "total_amount": float(po.total_amount),
        "notes": po.notes,
        "created_at": po.created_at,
        "can_edit": purchasing.can_edit(po),
        "can_add_products": purchasing.can_add_products(po),
        "can_create_receipt": purchasing.can_create_receipt(po),
        "progress": _progress_out(po),
    }
    if with_items:
        out["items"] = [_item_out(i) for i in po.items]
    return out


def _resolve_supplier(db: Session, supplier_id: int | None) -> Supplier | None:
    if supplier_id is None:
        return None
    supplier = db.get(Supplier, supplier_id)
    if not supplier:
        raise HTTPException(status_code=400, detail="Fournisseur invalide")
    return supplier


def _build_items(db: Session, items: list[POItemCreate]) -> list[PurchaseOrderItem]:
    if not items:
        raise HTTPException(status_code=400, detail="Veuillez ajouter au moins un article à la commande")
    try:
        purchasing.ensure_unique_products(ln.product_id for ln in items)
    except PurchasingError as e:
        raise HTTPException(status_code=409, detail=str(e))

    out = []
    for ln in items:
        if not db.get(Product, ln.product_id):
            raise HTTPException(status_code=400, detail=f"Produit invalide ({ln.product_id})")
        out.append(
            PurchaseOrderItem(
                product_id=ln.product_id,
                quantity_ordered=ln.quantity_ordered,
                # le reçu ne vient que des réceptions
                quantity_received=0,
                unit_price=ln.unit_price,
                total_price=purchasing.line_total(ln.quantity_ordered, ln.unit_price),
                notes=ln.notes or None,
            )
        )
    return out


def _clean(value: str | None) -> str | None:
    return value.strip() if value and value.strip() else None


# ---------- Endpoints ----------
@router.get("")
def list_orders(
    search: str | None = None,
    status: POStatus | None = None,
    db: Session = Depends(get_db),
):
    stmt = (
        select(PurchaseOrder)
        .options(selectinload(PurchaseOrder.items).selectinload(PurchaseOrderItem.product))
        .order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc())
    )
    if search:
        term = f"%{search.strip()}%"
        stmt = stmt.where(or_(PurchaseOrder.order_number.ilike(term), PurchaseOrder.supplier_name.ilike(term)))
    if status is not None:
        stmt = stmt.where(PurchaseOrder.status == status)

    rows = db.execute(stmt).scalars().all()
    return [order_out(po) for po in rows]


@router.get("/{po_id}")
def get_order(po_id: int, db: Session = Depends(get_db)):
    return order_out(_get_order(db, po_id))


@router.post("")
def create_order(payload: POCreate, db: Session = Depends(get_db)):
    order_number = _clean(payload.order_number)
    if order_number:
        exists = db.execute(
            select(PurchaseOrder).where(PurchaseOrder.order_number == order_number)
        ).scalar_one_or_none()
        if exists:
            raise HTTPException(status_code=409, detail="Un numéro de commande similaire existe déjà")

    supplier = _resolve_supplier(db, payload.supplier_id)
    items = _build_items(db, payload.items)

    po = PurchaseOrder(
        order_number=order_number or purchasing.next_order_number(db, payload.order_date),
        supplier_id=supplier.id if supplier else None,
        supplier_name=supplier.name if supplier else None,
        status=POStatus.draft,
        order_date=payload.order_date,
        expected_delivery_date=payload.expected_delivery_date,
        currency=payload.currency,
        tracking_number=_clean(payload.tracking_number),
        notes=_clean(payload.notes),
        items=items,
    )
    purchasing.refresh_order_total(po)
    db.add(po)
    try:
        db.flush()
    except IntegrityError as e:
        raise_db_error(db, e, "purchase_orders")
    commit_or_raise(db, "purchase_orders")
    return order_out(_get_order(db, po.id))


@router.put("/{po_id}")
def update_order(po_id: int, payload: POCreate, db: Session = Depends(get_db)):
    po = _get_order(db, po_id)
    if not purchasing.can_edit(po):
        raise HTTPException(status_code=409, detail="Seule une commande brouillon est modifiable")

    supplier = _resolve_supplier(db, payload.supplier_id)
    items = _build_items(db, payload.items)

    po.supplier_id = supplier.id if supplier else None
    po.supplier_name = supplier.name if supplier else None
    po.order_date = payload.order_date
    po.expected_delivery_date = payload.expected_delivery_date
    po.currency = payload.currency
    po.tracking_number = _clean(payload.tracking_number)
    po.notes = _clean(payload.notes)

    # remplace les articles : suppression puis réinsertion
    po.items.clear()
    db.flush()
    po.items.extend(items)
    purchasing.refresh_order_total(po)
    try:
        db.flush()
    except IntegrityError as e:
        raise_db_error(db, e, "purchase_orders")
    commit_or_raise(db, "purchase_orders")
    return order_out(_get_order(db, po.id))


@router.patch("/{po_id}/status")
def update_status(po_id: int, payload: POStatusUpdate, db: Session = Depends(get_db)):
    po = _get_order(db, po_id)
    try:
        purchasing.change_status(po, payload.status)
    except PurchasingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    commit_or_raise(db, "purchase_orders")
    return order_out(_get_order(db, po.id), with_items=False)


@router.post("/{po_id}/items")
def add_item(po_id: int, payload: POItemCreate, db: Session = Depends(get_db)):
    po = _get_order(db, po_id)
    if not purchasing.can_add_products(po):
        raise HTTPException(status_code=409, detail="Commande clôturée : ajout impossible")
    if any(i.product_id == payload.product_id for i in po.items):
        raise HTTPException(status_code=409, detail="Ce produit est déjà dans la commande")
    if not db.get(Product, payload.product_id):
        raise HTTPException(status_code=400, detail=f"Produit invalide ({payload.product_id})")

    item = PurchaseOrderItem(
        product_id=payload.product_id,
        quantity_ordered=payload.quantity_ordered,
        quantity_received=0,
        unit_price=payload.unit_price,
        total_price=purchasing.line_total(payload.quantity_ordered, payload.unit_price),
        notes=payload.notes or None,
    )
    po.items.append(item)
    purchasing.refresh_order_total(po)
    try:
        db.flush()
    except IntegrityError as e:
        raise_db_error(db, e, "purchase_order_items")
    commit_or_raise(db, "purchase_order_items")
    db.refresh(item)
    return _item_out(item)


@router.get("/{po_id}/progress")
def get_progress(po_id: int, db: Session = Depends(get_db)):
    return _progress_out(_get_order(db, po_id))


@router.get("/{po_id}/receipt-draft")
def receipt_draft(
    po_id: int,
    exchange_rate: Decimal | None = None,
    db: Session = Depends(get_db),
):
    po = _get_order(db, po_id)
    if exchange_rate is not None and exchange_rate <= 0:
        raise HTTPException(status_code=400, detail="Taux de change invalide")

    lines = purchasing.draft_receipt_lines(db, po, exchange_rate)
    return {
        "purchase_order_id": po.id,
        "order_number": po.order_number,
        "currency": po.currency,
        "can_create_receipt": purchasing.can_create_receipt(po),
        "lines": [
            {
                "purchase_order_item_id": ln.purchase_order_item_id,
                "product_id": ln.product_id,
                "product_name": ln.product_name,
                "product_sku": ln.product_sku,
                "max_quantity": ln.max_quantity,
                "quantity_received": ln.quantity_received,
                "order_unit_price": float(ln.order_unit_price),
                "transit_cost": float(ln.transit_cost),
                "floor_price": float(ln.floor_price) if ln.floor_price is not None else None,
                "unit_price": float(ln.unit_price),
                "total_price": float(ln.total_price),
            }
            for ln in lines
        ],
        "total_amount": float(sum((ln.total_price for ln in lines), Decimal("0"))),
    }


@router.get("/{po_id}/pdf")
def order_pdf(po_id: int, db: Session = Depends(get_db)):
    po = _get_order(db, po_id)
    content = render_purchase_order_pdf(po)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{po.order_number}.pdf"'},
    )
