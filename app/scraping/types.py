"""
Shared scraping runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from bs4 import BeautifulSoup

from app.domain.marketplace import MarketplaceSource


@dataclass(frozen=True)
class PageDocument:
    """
    Parsed page markup tagged with the URL it was loaded from.
    """

    url: str
    soup: BeautifulSoup
    html_length: int = 0

    @classmethod
    def from_html(cls, *, url: str, html: str) -> "PageDocument":
        return cls(url=url, soup=BeautifulSoup(html, "html.parser"), html_length=len(html))


@dataclass(frozen=True)
class ScrapedProduct:
    """
    One product as read from a listing item or a detail page.

    Created fresh per fetch and never retained by the scraping layer.
    """

    sku: str
    name: str
    source: MarketplaceSource
    current_price: Decimal | None = None
    previous_price: Decimal | None = None
    images: tuple[str, ...] = ()
    available: bool = True
    source_url: str | None = None

    @property
    def dedupe_key(self) -> tuple[str, str]:
        return (self.source.value, self.sku)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sku": self.sku,
            "name": self.name,
            "source": self.source.value,
            "current_price": self.current_price,
            "previous_price": self.previous_price,
            "images": list(self.images),
            "available": self.available,
            "source_url": self.source_url,
        }


@dataclass(frozen=True)
class ScrapedCategoryPage:
    """
    Category metadata plus the products found on one listing page.
    """

    name: str
    breadcrumb: str
    total_pages: int
    products_per_page: int
    current_page: int
    products: tuple[ScrapedProduct, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.total_pages < 1:
            object.__setattr__(self, "total_pages", 1)
        if self.current_page < 1:
            object.__setattr__(self, "current_page", 1)


@dataclass(frozen=True)
class ScrollOutcome:
    """
    Result of one bounded scroll-and-count session.
    """

    iterations: int
    final_count: int
    stabilized: bool
