"""
db/models/product.py

Scraped marketplace products, unique per (sku, source).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Product(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "products"

    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    current_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    previous_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    source_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Product page URL; may be null only for FALABELLA listing items",
    )
    images: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        comment="Ordered image URLs, first is the primary image",
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )

    category = relationship("Category", back_populates="products")

    __table_args__ = (
        UniqueConstraint("sku", "source", name="uq_products_sku_source"),
        CheckConstraint(
            "current_price IS NULL OR current_price >= 0",
            name="ck_products_current_price_non_negative",
        ),
        CheckConstraint(
            "previous_price IS NULL OR previous_price >= 0",
            name="ck_products_previous_price_non_negative",
        ),
        CheckConstraint(
            "source_url IS NOT NULL OR source = 'FALABELLA'",
            name="ck_products_source_url_required",
        ),
        Index("ix_products_source", "source"),
        Index("ix_products_category_id", "category_id"),
        Index("ix_products_available", "available"),
    )
