"""initial supply schema

Revision ID: 3a1f9c2d7b10
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3a1f9c2d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# valeurs = noms des membres Python (stockage SQLAlchemy par nom)
# types créés une seule fois : "currency" sert à deux tables
CURRENCY = postgresql.ENUM("mga", "eur", "usd", "rmb", name="currency", create_type=False)
PO_STATUS = postgresql.ENUM("draft", "pending", "ordered", "partial", "received", "cancelled", name="po_status", create_type=False)
PRODUCT_STATUS = postgresql.ENUM("active", "inactive", name="product_status", create_type=False)
TRACKING_STATUS = postgresql.ENUM("pending", "in_transit", "arrived", "received", name="tracking_status", create_type=False)

ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps(updated: bool = False) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()))
    return cols


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in (CURRENCY, PO_STATUS, PRODUCT_STATUS, TRACKING_STATUS):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "categories",
        sa.Column("id", ID, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("modules", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "suppliers",
        sa.Column("id", ID, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("contact_info", sa.Text()),
        sa.Column("modules", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "products",
        sa.Column("id", ID, primary_key=True),
        sa.Column("sku", sa.String(64), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("unit", sa.String(32), nullable=False, server_default="pièce"),
        sa.Column("barcode", sa.String(64), unique=True),
        sa.Column("min_stock_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reserved_stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category_id", ID, sa.ForeignKey("categories.id", ondelete="SET NULL")),
        sa.Column("supplier_id", ID, sa.ForeignKey("suppliers.id", ondelete="SET NULL")),
        sa.Column("status", PRODUCT_STATUS, nullable=False, server_default="active"),
        *_timestamps(),
        sa.CheckConstraint("min_stock_level >= 0", name="ck_product_min_stock_nonneg"),
        sa.CheckConstraint("reserved_stock <= current_stock", name="ck_product_reserved_le_current"),
    )

    op.create_table(
        "purchase_orders",
        sa.Column("id", ID, primary_key=True),
        sa.Column("order_number", sa.String(64), nullable=False, unique=True),
        sa.Column("supplier_id", ID, sa.ForeignKey("suppliers.id", ondelete="RESTRICT")),
        sa.Column("supplier_name", sa.String(255)),
        sa.Column("status", PO_STATUS, nullable=False, server_default="draft"),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("expected_delivery_date", sa.Date()),
        sa.Column("currency", CURRENCY, nullable=False, server_default="mga"),
        sa.Column("tracking_number", sa.String(128)),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text()),
        *_timestamps(updated=True),
    )
    op.create_index("ix_purchase_orders_tracking_number", "purchase_orders", ["tracking_number"])

    op.create_table(
        "purchase_order_items",
        sa.Column("id", ID, primary_key=True),
        sa.Column(
            "purchase_order_id",
            ID,
            sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", ID, sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_ordered", sa.Integer(), nullable=False),
        sa.Column("quantity_received", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.UniqueConstraint("purchase_order_id", "product_id", name="uq_po_item_product"),
        sa.CheckConstraint("quantity_ordered > 0", name="ck_po_item_qty_pos"),
        sa.CheckConstraint("quantity_received >= 0", name="ck_po_item_received_nonneg"),
        sa.CheckConstraint("quantity_received <= quantity_ordered", name="ck_po_item_received_le_ordered"),
        sa.CheckConstraint("unit_price >= 0", name="ck_po_item_unit_price_nonneg"),
    )
    op.create_index("ix_purchase_order_items_purchase_order_id", "purchase_order_items", ["purchase_order_id"])

    op.create_table(
        "tracking_numbers",
        sa.Column("id", ID, primary_key=True),
        sa.Column("tracking_number", sa.String(128), nullable=False, unique=True),
        sa.Column("purchase_order_id", ID, sa.ForeignKey("purchase_orders.id", ondelete="SET NULL")),
        sa.Column("length", sa.Numeric(10, 2)),
        sa.Column("width", sa.Numeric(10, 2)),
        sa.Column("height", sa.Numeric(10, 2)),
        sa.Column("weight_kg", sa.Numeric(10, 3)),
        sa.Column("rate_per_m3", sa.Numeric(14, 2)),
        sa.Column("rate_per_kg", sa.Numeric(14, 2)),
        sa.Column("exchange_rate_mga", sa.Numeric(14, 4)),
        sa.Column("status", TRACKING_STATUS, nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text()),
        *_timestamps(updated=True),
        sa.CheckConstraint("exchange_rate_mga IS NULL OR exchange_rate_mga > 0", name="ck_tracking_rate_pos"),
    )

    op.create_table(
        "receipts",
        sa.Column("id", ID, primary_key=True),
        sa.Column("receipt_number", sa.String(64), nullable=False, unique=True),
        sa.Column(
            "purchase_order_id",
            ID,
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("supplier_id", ID, sa.ForeignKey("suppliers.id", ondelete="SET NULL")),
        sa.Column("supplier_name", sa.String(255)),
        sa.Column("receipt_date", sa.Date(), nullable=False),
        sa.Column("currency", CURRENCY, nullable=False),
        sa.Column("exchange_rate", sa.Numeric(14, 4)),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("exchange_rate IS NULL OR exchange_rate > 0", name="ck_receipt_rate_pos"),
    )
    op.create_index("ix_receipts_purchase_order_id", "receipts", ["purchase_order_id"])

    op.create_table(
        "receipt_items",
        sa.Column("id", ID, primary_key=True),
        sa.Column("receipt_id", ID, sa.ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "purchase_order_item_id",
            ID,
            sa.ForeignKey("purchase_order_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("product_id", ID, sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_received", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("transit_cost", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("price_adjusted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("batch_number", sa.String(64)),
        sa.Column("expiry_date", sa.Date()),
        sa.Column("notes", sa.Text()),
        sa.CheckConstraint("quantity_received > 0", name="ck_receipt_item_qty_pos"),
        sa.CheckConstraint("unit_price >= 0", name="ck_receipt_item_unit_price_nonneg"),
    )
    op.create_index("ix_receipt_items_receipt", "receipt_items", ["receipt_id"])


def downgrade() -> None:
    op.drop_index("ix_receipt_items_receipt", table_name="receipt_items")
    op.drop_table("receipt_items")
    op.drop_index("ix_receipts_purchase_order_id", table_name="receipts")
    op.drop_table("receipts")
    op.drop_table("tracking_numbers")
    op.drop_index("ix_purchase_order_items_purchase_order_id", table_name="purchase_order_items")
    op.drop_table("purchase_order_items")
    op.drop_index("ix_purchase_orders_tracking_number", table_name="purchase_orders")
    op.drop_table("purchase_orders")
    op.drop_table("products")
    op.drop_table("suppliers")
    op.drop_table("categories")

    bind = op.get_bind()
    for enum_type in (TRACKING_STATUS, PRODUCT_STATUS, PO_STATUS, CURRENCY):
        enum_type.drop(bind, checkfirst=True)
