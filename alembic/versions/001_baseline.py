"""Baseline: back office core tables and legacy import job tables.

Revision ID: 001
Revises: (none)
Create Date: 2026-10-18 09:00:00.000000

Staging tables (stg_*) are not managed here: the legacy importer creates and
truncates them at runtime from its column manifest.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── product_group ────────────────────────────────────────────────────
    op.create_table(
        "product_group",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("legacy_code", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("legacy_code", name="uq_product_group_legacy_code"),
    )

    # ── product (FK → product_group) ─────────────────────────────────────
    op.create_table(
        "product",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("legacy_code", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("barcode", sa.String(length=50), nullable=True),
        sa.Column("reference", sa.String(length=100), nullable=True),
        sa.Column("group_id", sa.String(length=36), nullable=True),
        sa.Column("min_stock", sa.Numeric(precision=14, scale=3), nullable=True),
        sa.Column("price_cash", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("price_base", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["group_id"], ["product_group.id"]),
        sa.UniqueConstraint("legacy_code", name="uq_product_legacy_code"),
    )

    # ── customer ─────────────────────────────────────────────────────────
    op.create_table(
        "customer",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("legacy_code", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("cpf", sa.String(length=30), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("uf", sa.String(length=10), nullable=True),
        sa.Column("cep", sa.String(length=20), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("credit_limit", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("legacy_code", name="uq_customer_legacy_code"),
    )

    # ── seller / payment_term ────────────────────────────────────────────
    for table in ("seller", "payment_term"):
        op.create_table(
            table,
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("legacy_code", sa.String(length=50), nullable=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("legacy_code", name=f"uq_{table}_legacy_code"),
        )

    # ── sale (FK → seller, customer, payment_term) ───────────────────────
    op.create_table(
        "sale",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("emission_date", sa.Date(), nullable=True),
        sa.Column("order_number", sa.String(length=50), nullable=True),
        sa.Column("seller_id", sa.String(length=36), nullable=True),
        sa.Column("customer_id", sa.String(length=36), nullable=True),
        sa.Column("payment_term_id", sa.String(length=36), nullable=True),
        sa.Column("subtotal", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("discount", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("total", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="completed"),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("source", sa.String(length=20), nullable=True),
        sa.Column("source_key", sa.String(length=50), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["seller_id"], ["seller.id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.id"]),
        sa.ForeignKeyConstraint(["payment_term_id"], ["payment_term.id"]),
        sa.UniqueConstraint("source", "source_key", name="uq_sale_source_key"),
    )
    op.create_index("ix_sale_source", "sale", ["source"])

    # ── sale_item (FK → sale, product) ───────────────────────────────────
    op.create_table(
        "sale_item",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("sale_id", sa.String(length=36), nullable=False),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("total", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sale_id"], ["sale.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["product.id"]),
    )
    op.create_index("ix_sale_item_sale_id", "sale_item", ["sale_id"])

    # ── customer_payment / stock_movement (histories) ────────────────────
    op.create_table(
        "customer_payment",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=36), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("document_value", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("paid_value", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("remaining", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("source", sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.id"]),
    )
    op.create_index("ix_customer_payment_customer_id", "customer_payment", ["customer_id"])
    op.create_index("ix_customer_payment_source", "customer_payment", ["source"])

    op.create_table(
        "stock_movement",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("type", sa.String(length=10), nullable=True),
        sa.Column("quantity", sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column("unit_value", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("total", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("note_number", sa.String(length=50), nullable=True),
        sa.Column("source", sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["product_id"], ["product.id"]),
    )
    op.create_index("ix_stock_movement_product_id", "stock_movement", ["product_id"])
    op.create_index("ix_stock_movement_source", "stock_movement", ["source"])

    # ── legacy_imports / legacy_import_logs ──────────────────────────────
    op.create_table(
        "legacy_imports",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=100), nullable=False),
        sa.Column("session_dir", sa.Text(), nullable=False),
        sa.Column("overwrite", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="queued"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("finished_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("report_path", sa.Text(), nullable=True),
        sa.Column("summary", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_legacy_imports_session_id", "legacy_imports", ["session_id"], unique=True)
    op.create_index("ix_legacy_imports_status", "legacy_imports", ["status"])

    op.create_table(
        "legacy_import_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("import_id", sa.String(length=36), nullable=False),
        sa.Column("level", sa.String(length=10), nullable=False, server_default="info"),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["import_id"], ["legacy_imports.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_legacy_import_logs_import_id", "legacy_import_logs", ["import_id"])


def downgrade() -> None:
    op.drop_table("legacy_import_logs")
    op.drop_table("legacy_imports")
    op.drop_table("stock_movement")
    op.drop_table("customer_payment")
    op.drop_table("sale_item")
    op.drop_table("sale")
    op.drop_table("payment_term")
    op.drop_table("seller")
    op.drop_table("customer")
    op.drop_table("product")
    op.drop_table("product_group")
