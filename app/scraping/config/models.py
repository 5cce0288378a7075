"""
Scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.domain.marketplace import MarketplaceSource


@dataclass(frozen=True)
class ListingSelectors:
    """
    Selectors applied to one product node of a listing page.

    Each value may hold several comma-separated selectors, tried left to right.
    """

    items: str
    name: str
    name_fallbacks: tuple[str, ...] = ()
    current_price: str = ""
    previous_price: str = ""
    images: str = "img"
    sku_attributes: tuple[str, ...] = ("data-sku",)


@dataclass(frozen=True)
class DetailSelectors:
    """
    Selectors applied to a full product detail page.
    """

    name: str
    name_fallbacks: tuple[str, ...] = ()
    current_price: str = ""
    previous_price: str = ""
    images: str = ""
    buy_button: str = ""


@dataclass(frozen=True)
class CategorySelectors:
    """
    Selectors applied to a category listing page as a whole.
    """

    title: str
    pagination: str = ""
    total_products: str = ""


@dataclass(frozen=True)
class MarketplaceStrategy:
    """
    Everything that differs between sources, expressed as data.
    """

    source: MarketplaceSource
    url_patterns: tuple[str, ...]
    base_url: str
    listing: ListingSelectors
    detail: DetailSelectors
    category: CategorySelectors
    sku_url_patterns: tuple[str, ...] = ()
    products_per_page: int = 48
    uses_infinite_scroll: bool = False
    requires_synthetic_sku: bool = False
    detail_fetch_blocked: bool = False
    listing_url_fallback: bool = False
    headers: dict[str, str] = field(default_factory=dict)

    def matches_url(self, url: str) -> bool:
        lowered = url.strip().lower()
        return any(pattern in lowered for pattern in self.url_patterns)


@dataclass(frozen=True)
class CrawlerSettings:
    """
    Runtime settings for marketplace crawling.
    """

    config_path: str
    user_agent: str
    timeout_seconds: float
    max_retries: int
    backoff_initial_seconds: float
    backoff_multiplier: float
    page_load_timeout_seconds: float
    initial_settle_seconds: float
    scroll_settle_seconds: float
    max_scrolls: int
    stable_scrolls: int
    headless: bool
    synthetic_sku_mode: str
    storage_batch_size: int
    renderer_enabled: bool = True
