"""
Purchasing service.

Orchestre commandes fournisseurs et réceptions :
totaux, numérotation, règles de statut, application d'une réception.

Le calcul du prix plancher reste dans :
    backend.services.pricing
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.core.config import LOCAL_CURRENCY
from backend.app.db.models.models_v1 import (
    PurchaseOrder,
    PurchaseOrderItem,
    Receipt,
    ReceiptItem,
)
from backend.app.db.models.core_types import Currency, ItemReceiptState, POStatus
from backend.services.pricing import (
    clamp_price,
    floor_price,
    money,
    to_decimal,
)
from backend.services.tracking import transit_share_for_order

logger = logging.getLogger(__name__)

# Statuts autorisant une réception
RECEIVABLE_STATUSES = {POStatus.ordered, POStatus.partial}
# Statuts figés : plus d'ajout d'article
CLOSED_STATUSES = {POStatus.received, POStatus.cancelled}


class PurchasingError(ValueError):
    """Règle métier violée (traduite en 400/409 par l'API)."""


# ---------- TOTAUX ----------
def line_total(quantity, unit_price) -> Decimal:
    return money(Decimal(int(quantity or 0)) * (to_decimal(unit_price) or Decimal("0")))


def order_total(items: Iterable) -> Decimal:
    return money(sum((to_decimal(i.total_price) or Decimal("0") for i in items), Decimal("0")))


def remaining_quantity(item: PurchaseOrderItem) -> int:
    return max(0, item.quantity_ordered - item.quantity_received)


def item_receipt_state(item: PurchaseOrderItem) -> ItemReceiptState:
    if item.quantity_received >= item.quantity_ordered:
        return ItemReceiptState.complete
    if item.quantity_received > 0:
        return ItemReceiptState.partial
    return ItemReceiptState.pending


# ---------- NUMÉROTATION ----------
def next_document_number(db: Session, column, prefix: str, on: date | None = None) -> str:
    """
    Numéro séquentiel par jour : PREFIX-YYYYMMDD-NNNN.
    """
    day = (on or date.today()).strftime("%Y%m%d")
    stem = f"{prefix}-{day}-"
    last = (
        db.execute(select(column).where(column.like(f"{stem}%")).order_by(column.desc()).limit(1))
        .scalars()
        .first()
    )
    seq = 1
    if last:
        try:
            seq = int(last.rsplit("-", 1)[1]) + 1
        except ValueError:
            seq = 1
    return f"{stem}{seq:04d}"


def next_order_number(db: Session, on: date | None = None) -> str:
    return next_document_number(db, PurchaseOrder.order_number, "PO", on)


def next_receipt_number(db: Session, on: date | None = None) -> str:
    return next_document_number(db, Receipt.receipt_number, "REC", on)


# ---------- RÈGLES ----------
def can_edit(order: PurchaseOrder) -> bool:
    return order.status == POStatus.draft


def can_add_products(order: PurchaseOrder) -> bool:
    return order.status not in CLOSED_STATUSES


def has_unreceived_items(order: PurchaseOrder) -> bool:
    return any(i.quantity_received < i.quantity_ordered for i in order.items)


def can_create_receipt(order: PurchaseOrder) -> bool:
    return order.status in RECEIVABLE_STATUSES and has_unreceived_items(order)


def ensure_unique_products(product_ids: Iterable[int]) -> None:
    seen: set[int] = set()
    for pid in product_ids:
        if pid in seen:
            raise PurchasingError("Ce produit est déjà dans la commande")
        seen.add(pid)


# partial / received ne sont posés que par les réceptions
ALLOWED_TRANSITIONS = {
    POStatus.draft: {POStatus.pending, POStatus.ordered, POStatus.cancelled},
    POStatus.pending: {POStatus.draft, POStatus.ordered, POStatus.cancelled},
    POStatus.ordered: {POStatus.cancelled},
}


def change_status(order: PurchaseOrder, new_status: POStatus) -> None:
    if new_status == order.status:
        return
    if new_status not in ALLOWED_TRANSITIONS.get(order.status, set()):
        raise PurchasingError(
            f"Changement de statut interdit : {order.status.value} -> {new_status.value}"
        )
    if new_status == POStatus.cancelled and any(i.quantity_received > 0 for i in order.items):
        raise PurchasingError("Commande déjà partiellement reçue")
    if new_status == POStatus.ordered and not order.items:
        raise PurchasingError("Veuillez ajouter au moins un article à la commande")
    logger.info("order %s: %s -> %s", order.order_number, order.status.value, new_status.value)
    order.status = new_status


def status_after_receipt(order: PurchaseOrder) -> POStatus:
    if order.items and all(i.quantity_received >= i.quantity_ordered for i in order.items):
        return POStatus.received
    if any(i.quantity_received > 0 for i in order.items):
        return POStatus.partial
    return order.status


def refresh_order_total(order: PurchaseOrder) -> Decimal:
    for item in order.items:
        item.total_price = line_total(item.quantity_ordered, item.unit_price)
    order.total_amount = order_total(order.items)
    return order.total_amount


# ---------- RÉCEPTION ----------
def effective_rate(order: PurchaseOrder, exchange_rate=None) -> Decimal | None:
    """Taux ignoré quand la commande est déjà en devise locale."""
    if order.currency.value == LOCAL_CURRENCY:
        return None
    rate = to_decimal(exchange_rate)
    return rate if rate is not None and rate > 0 else None


def receipt_floor(order: PurchaseOrder, unit_price, rate, share) -> Decimal | None:
    """Plancher en devise locale. Commande étrangère sans taux : aucun plancher."""
    if rate is None and order.currency.value != LOCAL_CURRENCY:
        return None
    return floor_price(unit_price, rate, share)


@dataclass
class ReceiptLineDraft:
    purchase_order_item_id: int
    product_id: int
    product_name: str
    product_sku: str
    max_quantity: int
    quantity_received: int
    order_unit_price: Decimal
    transit_cost: Decimal
    floor_price: Decimal | None
    unit_price: Decimal
    total_price: Decimal


def draft_receipt_lines(db: Session, order: PurchaseOrder, exchange_rate=None) -> list[ReceiptLineDraft]:
    """
    Une ligne par article non soldé, pré-remplie avec le reste à recevoir
    et le prix plancher.
    """
    rate = effective_rate(order, exchange_rate)
    share = transit_share_for_order(db, order)
    lines: list[ReceiptLineDraft] = []
    for item in order.items:
        remaining = remaining_quantity(item)
        if remaining <= 0:
            continue
        floor = receipt_floor(order, item.unit_price, rate, share)
        price = floor if floor is not None else money(item.unit_price)
        lines.append(
            ReceiptLineDraft(
                purchase_order_item_id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else "",
                product_sku=item.product.sku if item.product else "",
                max_quantity=remaining,
                quantity_received=remaining,
                order_unit_price=money(item.unit_price),
                transit_cost=share,
                floor_price=floor,
                unit_price=price,
                total_price=line_total(remaining, price),
            )
        )
    return lines


@dataclass
class ReceiptLineInput:
    purchase_order_item_id: int
    quantity_received: int
    unit_price: Decimal | None = None
    batch_number: str | None = None
    expiry_date: date | None = None
    notes: str | None = None


def create_receipt(
    db: Session,
    order: PurchaseOrder,
    *,
    receipt_date: date,
    lines: list[ReceiptLineInput],
    exchange_rate=None,
    notes: str | None = None,
    receipt_number: str | None = None,
) -> Receipt:
    """
    Enregistre une réception complète (en-tête + lignes) et met à jour
    les quantités reçues et le statut de la commande.

    Ne fait pas de commit : la transaction appartient à l'appelant.
    """
    if not lines:
        raise PurchasingError("Veuillez ajouter au moins un article à la réception")
    if not can_create_receipt(order):
        raise PurchasingError("Réception impossible pour cette commande")

    by_id = {i.id: i for i in order.items}
    rate = effective_rate(order, exchange_rate)
    share = transit_share_for_order(db, order)

    receipt = Receipt(
        receipt_number=receipt_number or next_receipt_number(db, receipt_date),
        purchase_order_id=order.id,
        supplier_id=order.supplier_id,
        supplier_name=order.supplier_name,
        receipt_date=receipt_date,
        # montants convertis : la réception est en devise locale
        currency=Currency(LOCAL_CURRENCY) if rate is not None else order.currency,
        exchange_rate=rate,
        notes=notes or None,
    )

    seen: set[int] = set()
    for ln in lines:
        item = by_id.get(ln.purchase_order_item_id)
        if item is None:
            raise PurchasingError(f"Article {ln.purchase_order_item_id} absent de la commande")
        if item.id in seen:
            raise PurchasingError(f"Article {item.id} présent deux fois")
        seen.add(item.id)

        remaining = remaining_quantity(item)
        if ln.quantity_received <= 0 or ln.quantity_received > remaining:
            raise PurchasingError(
                f"Quantité invalide pour l'article {item.id} (max={remaining})"
            )

        floor = receipt_floor(order, item.unit_price, rate, share)
        entered = ln.unit_price
        if entered is None:
            entered = floor if floor is not None else item.unit_price
        price, adjusted = clamp_price(entered, floor)
        if adjusted:
            logger.info(
                "receipt line po_item=%s: price %s raised to floor %s",
                item.id, entered, floor,
            )

        receipt.items.append(
            ReceiptItem(
                purchase_order_item_id=item.id,
                product_id=item.product_id,
                quantity_received=ln.quantity_received,
                unit_price=price,
                transit_cost=share,
                total_price=line_total(ln.quantity_received, price),
                price_adjusted=adjusted,
                batch_number=ln.batch_number or None,
                expiry_date=ln.expiry_date,
                notes=ln.notes or None,
            )
        )
        item.quantity_received += ln.quantity_received
        if item.product is not None:
            item.product.current_stock += ln.quantity_received

    receipt.total_amount = order_total(receipt.items)
    order.status = status_after_receipt(order)

    db.add(receipt)
    db.flush()
    logger.info(
        "receipt %s created for order %s (%d lines, status=%s)",
        receipt.receipt_number, order.order_number, len(receipt.items), order.status.value,
    )
    return receipt
