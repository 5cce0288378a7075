"""
app/domain/marketplace.py

Domain enums and summaries for marketplace crawling.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


class MarketplaceSource(str, Enum):
    """
    Supported e-commerce sources. The value is what gets persisted.
    """

    MERCADO_LIBRE = "MERCADO_LIBRE"
    PARIS = "PARIS"
    FALABELLA = "FALABELLA"

    @classmethod
    def parse(cls, raw: str) -> "MarketplaceSource":
        normalized = raw.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown marketplace source '{raw}'. Allowed sources: {allowed}."
            ) from exc


class CategoryStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"
    PAUSED = "PAUSED"


@dataclass(frozen=True)
class CategoryCrawlSummary:
    """
    Outcome of one full category crawl.
    """

    category_url: str
    source: MarketplaceSource
    status: str
    total_pages: int
    pages_crawled: int
    failed_pages: int
    products_scraped: int
    products_inserted: int
    products_in_category: int
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProductCrawlSummary:
    """
    Outcome of a product detail batch crawl.
    """

    requested: int
    created: int
    updated: int
    failed: int
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryRecord:
    """
    Persisted category as seen by the crawl engine.
    """

    id: uuid.UUID
    name: str
    source: MarketplaceSource
    source_url: str
    total_pages: int
    status: CategoryStatus
