"""
SQLAlchemy-backed storage implementation for crawled data.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.marketplace import CategoryRecord, CategoryStatus, MarketplaceSource
from app.repositories.category_repository import CategoryRepository
from app.repositories.product_repository import ProductRepository
from app.scraping.storage.base import CrawlStorage
from app.scraping.types import ScrapedCategoryPage, ScrapedProduct
from db.models.category import Category


class SQLAlchemyCrawlStorage(CrawlStorage):
    """
    Persist categories and products through the repositories and DB session.

    Every write method commits on success and rolls back on failure.
    """

    def __init__(self, *, session: Session, batch_size: int = 500) -> None:
        self._session = session
        self._batch_size = max(1, batch_size)
        self._categories = CategoryRepository(session)
        self._products = ProductRepository(session)

    def find_category(self, source_url: str) -> CategoryRecord | None:
        category = self._categories.find_by_source_url(source_url)
        return _to_record(category) if category is not None else None

    def upsert_category(
        self,
        page: ScrapedCategoryPage,
        *,
        source_url: str,
        source: MarketplaceSource,
    ) -> CategoryRecord:
        try:
            category = self._categories.upsert_from_page(page, source_url=source_url, source=source)
            self._session.commit()
            return _to_record(category)
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def existing_skus(self, category_id: uuid.UUID) -> set[str]:
        return self._products.skus_for_category(category_id)

    def save_products(self, products: Sequence[ScrapedProduct], *, category_id: uuid.UUID) -> int:
        if not products:
            return 0

        try:
            inserted = self._products.bulk_insert(
                products,
                category_id=category_id,
                batch_size=self._batch_size,
            )
            self._session.commit()
            return inserted
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def count_products(self, category_id: uuid.UUID) -> int:
        return self._products.count_for_category(category_id)

    def upsert_product(self, product: ScrapedProduct) -> bool:
        try:
            created = self._products.upsert(product)
            self._session.commit()
            return created
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def mark_category_complete(self, category_id: uuid.UUID, *, total_products: int) -> None:
        self._set_status(category_id, CategoryStatus.COMPLETE, total_products=total_products)

    def mark_category_error(self, category_id: uuid.UUID, *, error: str) -> None:
        self._set_status(category_id, CategoryStatus.ERROR, error_message=error)

    def _set_status(self, category_id: uuid.UUID, status: CategoryStatus, **fields) -> None:
        try:
            self._categories.set_status(category_id, status, **fields)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise


def _to_record(category: Category) -> CategoryRecord:
    return CategoryRecord(
        id=category.id,
        name=category.name,
        source=MarketplaceSource(category.source),
        source_url=category.source_url,
        total_pages=category.total_pages,
        status=CategoryStatus(category.status),
    )
