"""
app/repositories/product_repository.py

Persistence layer for scraped products.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.scraping.types import ScrapedProduct
from db.models.product import Product

_DEFAULT_BATCH_SIZE = 500
_DEDUPE_CONSTRAINT = "uq_products_sku_source"


class ProductRepository:
    """
    Repository for product inserts and (sku, source) upserts.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find(self, *, sku: str, source: str) -> Product | None:
        stmt = select(Product).where(Product.sku == sku, Product.source == source)
        return self._session.scalars(stmt).first()

    def skus_for_category(self, category_id: uuid.UUID) -> set[str]:
        stmt = select(Product.sku).where(Product.category_id == category_id)
        return set(self._session.scalars(stmt).all())

    def count_for_category(self, category_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Product).where(Product.category_id == category_id)
        return int(self._session.scalar(stmt) or 0)

    def bulk_insert(
        self,
        products: Sequence[ScrapedProduct],
        *,
        category_id: uuid.UUID | None = None,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert products with PostgreSQL bulk INSERT, skipping (sku, source)
        pairs that already exist.
        """

        if not products:
            return 0

        payloads = self._deduplicate_payloads(
            [self._payload(product, category_id=category_id) for product in products]
        )
        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            stmt = (
                insert(Product)
                .values(chunk)
                .on_conflict_do_nothing(constraint=_DEDUPE_CONSTRAINT)
                .returning(Product.id)
            )
            inserted += len(self._session.scalars(stmt).all())
        return inserted

    def upsert(self, product: ScrapedProduct) -> bool:
        """
        Create or refresh one product. Returns True when a row was created.
        """

        existing = self.find(sku=product.sku, source=product.source.value)
        if existing is None:
            self._session.add(Product(**self._payload(product)))
            self._session.flush()
            return True

        existing.name = product.name
        existing.current_price = product.current_price
        existing.previous_price = product.previous_price
        existing.available = product.available
        existing.images = list(product.images)
        if product.source_url:
            existing.source_url = product.source_url
        self._session.flush()
        return False

    @staticmethod
    def _payload(product: ScrapedProduct, *, category_id: uuid.UUID | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sku": product.sku,
            "name": product.name[:500],
            "current_price": product.current_price,
            "previous_price": product.previous_price,
            "available": product.available,
            "source": product.source.value,
            "source_url": product.source_url,
            "images": list(product.images),
        }
        if category_id is not None:
            payload["category_id"] = category_id
        return payload

    @staticmethod
    def _deduplicate_payloads(payloads: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        seen: set[tuple[str, str]] = set()
        deduped: list[dict[str, Any]] = []
        for payload in payloads:
            key = (payload["sku"], payload["source"])
            if key in seen:
                continue
            seen.add(key)
            deduped.append(payload)
        return deduped
