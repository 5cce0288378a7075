"""
Config helpers for marketplace crawling.
"""

from app.scraping.config.loader import (
    get_crawler_settings,
    load_marketplace_strategies,
    parse_marketplace_strategies,
)
from app.scraping.config.models import (
    CategorySelectors,
    CrawlerSettings,
    DetailSelectors,
    ListingSelectors,
    MarketplaceStrategy,
)

__all__ = [
    "CategorySelectors",
    "CrawlerSettings",
    "DetailSelectors",
    "ListingSelectors",
    "MarketplaceStrategy",
    "get_crawler_settings",
    "load_marketplace_strategies",
    "parse_marketplace_strategies",
]
