import enum


class Currency(str, enum.Enum):
    mga = "MGA"
    eur = "EUR"
    usd = "USD"
    rmb = "RMB"


class POStatus(str, enum.Enum):
    draft = "draft"
    pending = "pending"
    ordered = "ordered"
    partial = "partial"
    received = "received"
    cancelled = "cancelled"


class ItemReceiptState(str, enum.Enum):
    pending = "pending"
    partial = "partial"
    complete = "complete"


class ProductStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class TrackingStatus(str, enum.Enum):
    pending = "pending"
    in_transit = "in_transit"
    arrived = "arrived"
    received = "received"


class DeliveryState(str, enum.Enum):
    normal = "normal"
    warning = "warning"
    overdue = "overdue"
