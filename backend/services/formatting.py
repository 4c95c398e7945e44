from __future__ import annotations

import math

from backend.app.core.config import LOCAL_CURRENCY


def _trim(value: float, digits: int) -> str:
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{digits}f}".rstrip("0").rstrip(".")


def format_compact_number_only(value) -> str:
    """40000 -> "40K", 1280000 -> "1.28M", 500 -> "500"."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return "0"
    if math.isnan(value):
        return "0"

    sign = "-" if value < 0 else ""
    abs_value = abs(value)
    if abs_value >= 1_000_000:
        return f"{sign}{_trim(abs_value / 1_000_000, 2)}M"
    if abs_value >= 1_000:
        return f"{sign}{_trim(abs_value / 1_000, 1)}K"
    return f"{sign}{math.floor(abs_value + 0.5)}"


def format_compact_number(value, currency: str = LOCAL_CURRENCY) -> str:
    return f"{format_compact_number_only(value)} {currency}"


def format_amount(value, currency: str = LOCAL_CURRENCY) -> str:
    """1234567.5 -> "1 234 567.50 MGA"."""
    try:
        value = float(value or 0)
    except (TypeError, ValueError):
        value = 0.0
    return f"{value:,.2f}".replace(",", " ") + f" {currency}"
