"""create categories and products tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("source_url", sa.Text(), nullable=False),
        sa.Column("breadcrumb", sa.String(length=500), nullable=True),
        sa.Column("total_pages", sa.Integer(), nullable=False),
        sa.Column("total_products", sa.Integer(), nullable=False),
        sa.Column("products_per_page", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("error_message", sa.String(length=1000), nullable=True),
        sa.Column("last_crawled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_url"),
        sa.CheckConstraint("total_pages > 0", name="ck_categories_total_pages_positive"),
        sa.CheckConstraint("total_products >= 0", name="ck_categories_total_products_non_negative"),
        sa.CheckConstraint(
            "status IN ('ACTIVE', 'COMPLETE', 'ERROR', 'PAUSED')",
            name="ck_categories_status",
        ),
    )
    op.create_index("ix_categories_source", "categories", ["source"], unique=False)
    op.create_index("ix_categories_status", "categories", ["status"], unique=False)
    op.create_index("ix_categories_last_crawled_at", "categories", ["last_crawled_at"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("current_price", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("previous_price", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("available", sa.Boolean(), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("images", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("sku", "source", name="uq_products_sku_source"),
        sa.CheckConstraint(
            "current_price IS NULL OR current_price >= 0",
            name="ck_products_current_price_non_negative",
        ),
        sa.CheckConstraint(
            "previous_price IS NULL OR previous_price >= 0",
            name="ck_products_previous_price_non_negative",
        ),
        sa.CheckConstraint(
            "source_url IS NOT NULL OR source = 'FALABELLA'",
            name="ck_products_source_url_required",
        ),
    )
    op.create_index("ix_products_source", "products", ["source"], unique=False)
    op.create_index("ix_products_category_id", "products", ["category_id"], unique=False)
    op.create_index("ix_products_available", "products", ["available"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_products_available", table_name="products")
    op.drop_index("ix_products_category_id", table_name="products")
    op.drop_index("ix_products_source", table_name="products")
    op.drop_table("products")
    op.drop_index("ix_categories_last_crawled_at", table_name="categories")
    op.drop_index("ix_categories_status", table_name="categories")
    op.drop_index("ix_categories_source", table_name="categories")
    op.drop_table("categories")
