"""
Numéros de suivi (colis partagés entre commandes).

- coût transport : max(coût au volume, coût au poids), en USD
- conversion MGA via le taux du colis
- synchronisation : un enregistrement par numéro de suivi distinct
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import (
    PurchaseOrder,
    PurchaseOrderItem,
    TrackingNumber,
)
from backend.app.db.models.core_types import TrackingStatus
from backend.services.pricing import to_decimal, money, transit_share

logger = logging.getLogger(__name__)

CM3_PER_M3 = Decimal("1000000")


@dataclass
class ShipmentCost:
    volume_m3: Decimal
    cost_by_volume: Decimal
    cost_by_weight: Decimal
    total_cost_usd: Decimal
    total_cost_mga: Decimal


def compute_shipment_cost(
    length=None,
    width=None,
    height=None,
    weight_kg=None,
    rate_per_m3=None,
    rate_per_kg=None,
    exchange_rate_mga=None,
) -> ShipmentCost:
    zero = Decimal("0")
    l, w, h = to_decimal(length) or zero, to_decimal(width) or zero, to_decimal(height) or zero

    volume = (l * w * h) / CM3_PER_M3 if (l and w and h) else zero

    r_m3 = to_decimal(rate_per_m3) or zero
    by_volume = volume * r_m3 if (volume and r_m3) else zero

    kg = to_decimal(weight_kg) or zero
    r_kg = to_decimal(rate_per_kg) or zero
    by_weight = kg * r_kg if (kg and r_kg) else zero

    total_usd = max(by_volume, by_weight)

    rate = to_decimal(exchange_rate_mga) or zero
    total_mga = total_usd * rate if (rate and total_usd) else zero

    return ShipmentCost(
        volume_m3=volume.quantize(Decimal("0.000001")),
        cost_by_volume=money(by_volume),
        cost_by_weight=money(by_weight),
        total_cost_usd=money(total_usd),
        total_cost_mga=money(total_mga),
    )


def shipment_cost_for(tn: TrackingNumber) -> ShipmentCost:
    return compute_shipment_cost(
        length=tn.length,
        width=tn.width,
        height=tn.height,
        weight_kg=tn.weight_kg,
        rate_per_m3=tn.rate_per_m3,
        rate_per_kg=tn.rate_per_kg,
        exchange_rate_mga=tn.exchange_rate_mga,
    )


def _has_tracking():
    return (PurchaseOrder.tracking_number.is_not(None)) & (PurchaseOrder.tracking_number != "")


def sync_tracking_numbers(db: Session) -> list[TrackingNumber]:
    """
    Crée les numéros de suivi manquants à partir des commandes.

    La première commande rencontrée (ordre de création) sert de référence.
    Les enregistrements existants ne sont jamais modifiés.
    """
    orders = db.execute(
        select(PurchaseOrder.id, PurchaseOrder.tracking_number)
        .where(_has_tracking())
        .order_by(PurchaseOrder.created_at, PurchaseOrder.id)
    ).all()

    existing = set(db.execute(select(TrackingNumber.tracking_number)).scalars().all())

    created: list[TrackingNumber] = []
    for po_id, tracking in orders:
        if tracking in existing:
            continue
        existing.add(tracking)
        tn = TrackingNumber(
            tracking_number=tracking,
            purchase_order_id=po_id,
            status=TrackingStatus.pending,
        )
        db.add(tn)
        created.append(tn)

    if created:
        db.flush()
        logger.info("sync tracking numbers: %d created", len(created))
    return created


def order_counts(db: Session) -> dict[str, int]:
    rows = db.execute(
        select(PurchaseOrder.tracking_number, func.count(PurchaseOrder.id))
        .where(_has_tracking())
        .group_by(PurchaseOrder.tracking_number)
    ).all()
    return {tn: int(n) for tn, n in rows}


def count_items_sharing(db: Session, tracking_number: str) -> int:
    """Nombre de lignes de commande couvertes par un même colis."""
    return int(
        db.execute(
            select(func.count(PurchaseOrderItem.id))
            .join(PurchaseOrder, PurchaseOrder.id == PurchaseOrderItem.purchase_order_id)
            .where(PurchaseOrder.tracking_number == tracking_number)
        ).scalar_one()
    )


def transit_share_for_order(db: Session, order: PurchaseOrder) -> Decimal:
    """Quote-part transport (MGA) d'une ligne de la commande."""
    if not order.tracking_number:
        return Decimal("0.00")

    tn = db.execute(
        select(TrackingNumber).where(TrackingNumber.tracking_number == order.tracking_number)
    ).scalar_one_or_none()
    if not tn:
        return Decimal("0.00")

    cost = shipment_cost_for(tn)
    return transit_share(cost.total_cost_mga, count_items_sharing(db, order.tracking_number))
