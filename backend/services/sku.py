"""
SKU incrémental : XXX-YYMMDD-NNNNN

- XXX    : 3 premières lettres du nom (majuscules, complétées par X)
- YYMMDD : date du jour
- NNNNN  : séquence par couple lettres/date
"""

from __future__ import annotations

import re
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Product

SKU_PATTERN = re.compile(r"^[A-Z]{3}-\d{6}-\d{5}$")


def sku_prefix(product_name: str, on: date | None = None) -> str:
    name = (product_name or "").strip()
    if len(name) < 3:
        raise ValueError("Le nom du produit doit contenir au moins 3 caractères")
    letters = name[:3].upper().ljust(3, "X")
    return f"{letters}-{(on or date.today()).strftime('%y%m%d')}"


def generate_sku(db: Session, product_name: str, on: date | None = None) -> str:
    prefix = sku_prefix(product_name, on)
    last = (
        db.execute(
            select(Product.sku)
            .where(Product.sku.like(f"{prefix}-%"))
            .order_by(Product.sku.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )
    seq = 1
    if last:
        try:
            seq = int(last.split("-")[2]) + 1
        except (IndexError, ValueError):
            seq = 1
    return f"{prefix}-{seq:05d}"


def validate_sku(sku: str) -> bool:
    return bool(SKU_PATTERN.match(sku or ""))


def parse_sku(sku: str) -> dict:
    parts = (sku or "").split("-")
    if len(parts) != 3:
        raise ValueError("Format de SKU invalide")
    return {
        "product_letters": parts[0],
        "date": parts[1],
        "sequence": int(parts[2]),
    }
