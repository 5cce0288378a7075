"""
db/models/category.py

Marketplace categories with their pagination metadata and crawl status.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Category(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    source: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="MarketplaceSource value",
    )
    source_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        comment="Category URL used for re-crawling",
    )
    breadcrumb: Mapped[str | None] = mapped_column(String(500), nullable=True)
    total_pages: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_products: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    products_per_page: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="ACTIVE")
    error_message: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    last_crawled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    products = relationship("Product", back_populates="category")

    __table_args__ = (
        CheckConstraint("total_pages > 0", name="ck_categories_total_pages_positive"),
        CheckConstraint("total_products >= 0", name="ck_categories_total_products_non_negative"),
        CheckConstraint(
            "status IN ('ACTIVE', 'COMPLETE', 'ERROR', 'PAUSED')",
            name="ck_categories_status",
        ),
        Index("ix_categories_source", "source"),
        Index("ix_categories_status", "status"),
        Index("ix_categories_last_crawled_at", "last_crawled_at"),
    )
