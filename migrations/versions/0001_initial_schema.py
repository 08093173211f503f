"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

id_type = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "category",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "product",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("available_qty", sa.Integer(), nullable=False),
        sa.Column("unit_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("sale_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("category_id", id_type, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("available_qty >= 0", name="ck_product_available_qty_non_negative"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "raw_material",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("unit", sa.String(length=16), nullable=False),
        sa.Column("stock", sa.Numeric(12, 3), nullable=False),
        sa.Column("average_cost", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("stock >= 0", name="ck_raw_material_stock_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "sale",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_cents", sa.BigInteger(), nullable=False),
        sa.Column("discount_cents", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.Enum("COMPLETE", name="sale_status"), nullable=False),
        sa.Column("kind", sa.Enum("DIRECT", "FROM_ORDER", name="sale_kind"), nullable=False),
        sa.Column("legacy_items", sa.Text(), nullable=True),
        sa.Column("legacy_payments", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sale_created_at"), "sale", ["created_at"], unique=False)

    op.create_table(
        "sale_line",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("sale_id", id_type, nullable=False),
        sa.Column("product_id", id_type, nullable=False),
        sa.Column("qty", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.BigInteger(), nullable=False),
        sa.Column("subtotal_cents", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["sale_id"], ["sale.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["product.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sale_line_sale_id"), "sale_line", ["sale_id"], unique=False)
    op.create_index(op.f("ix_sale_line_product_id"), "sale_line", ["product_id"], unique=False)

    op.create_table(
        "sale_payment",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("sale_id", id_type, nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("rate", sa.Numeric(12, 4), nullable=True),
        sa.Column("converted_cents", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["sale_id"], ["sale.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sale_payment_sale_id"), "sale_payment", ["sale_id"], unique=False)

    op.create_table(
        "customer_order",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("delivery_date", sa.Date(), nullable=False),
        sa.Column("estimated_total_cents", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("sale_id", id_type, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["sale_id"], ["sale.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sale_id"),
    )
    op.create_index(op.f("ix_customer_order_status"), "customer_order", ["status"], unique=False)
    op.create_index(op.f("ix_customer_order_created_at"), "customer_order", ["created_at"], unique=False)

    op.create_table(
        "order_line",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("order_id", id_type, nullable=False),
        sa.Column("product_id", id_type, nullable=False),
        sa.Column("qty", sa.Integer(), nullable=False),
        sa.Column("estimated_unit_price_cents", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["customer_order.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["product.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_order_line_order_id"), "order_line", ["order_id"], unique=False)

    op.create_table(
        "order_deposit",
        sa.Column("id", id_type, autoincrement=True, nullable=False),
        sa.Column("order_id", id_type, nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("method", sa.String(length=30), nullable=True),
        sa.ForeignKeyConstraint(["order_id"], ["customer_order.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_order_deposit_order_id"), "order_deposit", ["order_id"], unique=False)

    op.create_table(
        "system_setting",
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("system_setting")
    op.drop_index(op.f("ix_order_deposit_order_id"), table_name="order_deposit")
    op.drop_table("order_deposit")
    op.drop_index(op.f("ix_order_line_order_id"), table_name="order_line")
    op.drop_table("order_line")
    op.drop_index(op.f("ix_customer_order_created_at"), table_name="customer_order")
    op.drop_index(op.f("ix_customer_order_status"), table_name="customer_order")
    op.drop_table("customer_order")
    op.drop_index(op.f("ix_sale_payment_sale_id"), table_name="sale_payment")
    op.drop_table("sale_payment")
    op.drop_index(op.f("ix_sale_line_product_id"), table_name="sale_line")
    op.drop_index(op.f("ix_sale_line_sale_id"), table_name="sale_line")
    op.drop_table("sale_line")
    op.drop_index(op.f("ix_sale_created_at"), table_name="sale")
    op.drop_table("sale")
    op.drop_table("raw_material")
    op.drop_table("product")
    op.drop_table("category")
    sa.Enum(name="sale_kind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="sale_status").drop(op.get_bind(), checkfirst=True)
