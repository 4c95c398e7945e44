"""
Progression de livraison d'une commande (barre de progression).

    pourcentage = jours écoulés / jours prévus, borné à [0, 100]
    overdue  : date prévue dépassée (100 %)
    warning  : 3 jours ou moins avant la date prévue
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from backend.app.db.models.core_types import DeliveryState

WARNING_DAYS = 3


@dataclass
class DeliveryProgress:
    total_days: int
    days_elapsed: int
    days_remaining: int
    percentage: float
    status: DeliveryState

    @property
    def short_label(self) -> str:
        if self.days_remaining < 0:
            return f"{abs(self.days_remaining)}j en retard"
        if self.days_remaining == 0:
            return "Aujourd'hui"
        return f"{self.days_remaining}j"

    @property
    def label(self) -> str:
        n = abs(self.days_remaining)
        if self.days_remaining < 0:
            return f"{n} jour{'s' if n > 1 else ''} en retard"
        if self.days_remaining == 0:
            return "Livraison prévue aujourd'hui"
        s = "s" if n > 1 else ""
        return f"{n} jour{s} restant{s}"

    @property
    def title(self) -> str:
        if self.status == DeliveryState.overdue:
            return "Date de livraison dépassée"
        if self.status == DeliveryState.warning:
            return "Livraison imminente"
        return "Progression de la livraison"


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def compute_progress(order_date, expected_date, today=None) -> DeliveryProgress | None:
    if not expected_date:
        return None

    start = _as_date(order_date)
    end = _as_date(expected_date)
    now = _as_date(today or date.today())

    total_days = (end - start).days
    days_elapsed = (now - start).days
    days_remaining = (end - now).days

    status = DeliveryState.normal
    if total_days > 0:
        percentage = min(100.0, max(0.0, days_elapsed / total_days * 100))
        if days_remaining < 0:
            status = DeliveryState.overdue
            percentage = 100.0
        elif days_remaining <= WARNING_DAYS:
            status = DeliveryState.warning
    else:
        # date prévue <= date de commande
        if days_remaining < 0:
            status = DeliveryState.overdue
        percentage = 100.0

    return DeliveryProgress(
        total_days=total_days,
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        percentage=round(percentage, 2),
        status=status,
    )
