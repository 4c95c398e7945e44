"""
Prix plancher des lignes de réception.

Règle métier :
    prix_plancher = prix_achat × taux_de_change (optionnel) + quote-part transport

La quote-part transport = coût total du colis / nombre de lignes de commande
partageant le même numéro de suivi (toutes commandes confondues).

Un prix unitaire de réception ne descend jamais sous le plancher.
Commande en devise étrangère sans taux : conversion impossible, pas de plancher.
Entrée manquante -> pas de calcul (None), jamais d'exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def restate_price(unit_price, exchange_rate=None) -> Decimal | None:
    """Prix d'achat ramené en devise locale (taux absent ou <= 0 : inchangé)."""
    price = to_decimal(unit_price)
    if price is None:
        return None

    rate = to_decimal(exchange_rate)
    if rate is None or rate <= 0:
        return money(price)
    return money(price * rate)


def transit_share(total_transit_cost, item_count: int) -> Decimal:
    cost = to_decimal(total_transit_cost)
    if cost is None or cost <= 0 or not item_count or item_count <= 0:
        return Decimal("0.00")
    return money(cost / item_count)


def floor_price(unit_price, exchange_rate=None, share=None) -> Decimal | None:
    restated = restate_price(unit_price, exchange_rate)
    if restated is None:
        return None
    return money(restated + (to_decimal(share) or Decimal("0")))


def clamp_price(entered, floor) -> tuple[Decimal | None, bool]:
    """
    Retourne (prix effectif, ajusté ?).

    Un prix saisi sous le plancher est remonté au plancher et signalé.
    """
    price = to_decimal(entered)
    low = to_decimal(floor)

    if low is None:
        return (money(price) if price is not None else None), False
    if price is None or price < low:
        return money(low), True
    return money(price), False


def _rated_floor(unit_price, exchange_rate, share) -> Decimal | None:
    rate = to_decimal(exchange_rate)
    if rate is None or rate <= 0:
        return None
    return floor_price(unit_price, rate, share)


@dataclass
class PricedLine:
    """Ligne de réception vue par le calcul de prix."""

    order_unit_price: Decimal
    unit_price: Decimal
    quantity: int = 0
    adjusted: bool = False

    @property
    def total_price(self) -> Decimal:
        return money(self.unit_price * self.quantity)


def reprice_on_rate_change(
    lines: Iterable[PricedLine],
    old_rate,
    new_rate,
    share=None,
) -> list[PricedLine]:
    """
    Après changement du taux de change : toute ligne dont le prix était
    au plancher (ou dessous) suit le nouveau plancher. Les prix saisis
    au-dessus du plancher restent intacts.

    Lignes en devise étrangère : sans taux, pas de plancher. Le prix
    revient au prix de commande, non converti.
    """
    out: list[PricedLine] = []
    for line in lines:
        old_floor = _rated_floor(line.order_unit_price, old_rate, share)
        new_floor = _rated_floor(line.order_unit_price, new_rate, share)

        if new_floor is None:
            if old_floor is not None:
                line.unit_price = money(to_decimal(line.order_unit_price))
                line.adjusted = False
            out.append(line)
            continue

        if old_floor is None or line.unit_price <= old_floor:
            line.unit_price = new_floor
            line.adjusted = False
        elif line.unit_price < new_floor:
            # prix manuel devenu trop bas avec le nouveau taux
            line.unit_price = new_floor
            line.adjusted = True

        out.append(line)
    return out
