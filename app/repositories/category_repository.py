"""
app/repositories/category_repository.py

Persistence layer for marketplace categories.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.marketplace import CategoryStatus, MarketplaceSource
from app.scraping.types import ScrapedCategoryPage
from db.models.category import Category


class CategoryRepository:
    """
    Category lookups and status transitions keyed by source URL.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, category_id: uuid.UUID) -> Category | None:
        return self._session.get(Category, category_id)

    def find_by_source_url(self, source_url: str) -> Category | None:
        stmt = select(Category).where(Category.source_url == source_url)
        return self._session.scalars(stmt).first()

    def upsert_from_page(
        self,
        page: ScrapedCategoryPage,
        *,
        source_url: str,
        source: MarketplaceSource,
    ) -> Category:
        """
        Insert the category or refresh its name and pagination metadata.
        """

        category = self.find_by_source_url(source_url)
        if category is None:
            category = Category(
                source_url=source_url,
                source=source.value,
                status=CategoryStatus.ACTIVE.value,
                total_products=0,
            )
            self._session.add(category)

        category.name = page.name
        category.breadcrumb = page.breadcrumb
        category.total_pages = page.total_pages
        category.products_per_page = page.products_per_page
        self._session.flush()
        return category

    def set_status(
        self,
        category_id: uuid.UUID,
        status: CategoryStatus,
        *,
        total_products: int | None = None,
        error_message: str | None = None,
    ) -> Category | None:
        category = self.get(category_id)
        if category is None:
            return None

        category.status = status.value
        category.last_crawled_at = datetime.now(timezone.utc)
        category.error_message = error_message[:1000] if error_message else None
        if total_products is not None:
            category.total_products = max(0, total_products)
        self._session.flush()
        return category
