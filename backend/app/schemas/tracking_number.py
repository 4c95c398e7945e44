from datetime import datetime

from pydantic import BaseModel

from backend.app.db.models.core_types import TrackingStatus


class TrackingNumberRead(BaseModel):
    id: int
    tracking_number: str
    purchase_order_id: int | None = None

    length: float | None = None
    width: float | None = None
    height: float | None = None
    weight_kg: float | None = None
    rate_per_m3: float | None = None
    rate_per_kg: float | None = None
    exchange_rate_mga: float | None = None

    status: TrackingStatus
    notes: str | None = None
    created_at: datetime

    # lecture seule : calculés, jamais écrits
    order_count: int = 1
    item_count: int = 0
    volume_m3: float = 0.0
    total_cost_usd: float = 0.0
    total_cost_mga: float = 0.0
    transit_share: float = 0.0

    class Config:
        from_attributes = True
