from datetime import date

from pydantic import BaseModel

from backend.app.db.models.core_types import Currency


class ReceiptItemRead(BaseModel):
    id: int
    purchase_order_item_id: int
    product_id: int
    product_name: str = ""

    quantity_received: int
    unit_price: float
    transit_cost: float
    total_price: float
    price_adjusted: bool  # prix remonté au plancher

    batch_number: str | None = None
    expiry_date: date | None = None
    notes: str | None = None


class ReceiptRead(BaseModel):
    id: int
    receipt_number: str
    purchase_order_id: int
    supplier_id: int | None = None
    supplier_name: str | None = None
    receipt_date: date
    currency: Currency
    exchange_rate: float | None = None
    total_amount: float
    notes: str | None = None
    items: list[ReceiptItemRead] = []

    class Config:
        from_attributes = True
