"""
Storage layer interfaces for crawled categories and products.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.domain.marketplace import CategoryRecord, MarketplaceSource
from app.scraping.types import ScrapedCategoryPage, ScrapedProduct


class CrawlStorage(ABC):
    """
    Storage abstraction for crawl writes.
    """

    @abstractmethod
    def find_category(self, source_url: str) -> CategoryRecord | None:
        """
        Return the category stored for this URL, if any.
        """

    @abstractmethod
    def upsert_category(
        self,
        page: ScrapedCategoryPage,
        *,
        source_url: str,
        source: MarketplaceSource,
    ) -> CategoryRecord:
        """
        Create the category or refresh its metadata from a first page.
        """

    @abstractmethod
    def existing_skus(self, category_id: uuid.UUID) -> set[str]:
        """
        Skus already stored for a category.
        """

    @abstractmethod
    def save_products(self, products: Sequence[ScrapedProduct], *, category_id: uuid.UUID) -> int:
        """
        Persist new products of a category and return inserted row count.
        """

    @abstractmethod
    def count_products(self, category_id: uuid.UUID) -> int:
        """
        Number of products stored for a category.
        """

    @abstractmethod
    def upsert_product(self, product: ScrapedProduct) -> bool:
        """
        Create or refresh a product by (sku, source). True when created.
        """

    @abstractmethod
    def mark_category_complete(self, category_id: uuid.UUID, *, total_products: int) -> None:
        """
        Record a finished crawl.
        """

    @abstractmethod
    def mark_category_error(self, category_id: uuid.UUID, *, error: str) -> None:
        """
        Record a crawl that could not finish.
        """
