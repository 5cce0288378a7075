"""
Base scraper abstraction for marketplace scraping.
"""

from __future__ import annotations

import logging

from app.scraping.config.models import CrawlerSettings, MarketplaceStrategy
from app.scraping.fetcher import DocumentFetcher
from app.scraping.logging_utils import log_event
from app.scraping.registry import StrategyRegistry
from app.scraping.renderer import DynamicContentRenderer
from app.scraping.types import PageDocument

logger = logging.getLogger(__name__)


class ScraperBase:
    """
    Shared collaborators and document loading for the marketplace scrapers.

    Listing pages of infinite-scroll sources go through the renderer when one
    is configured; everything else is fetched as static markup.
    """

    def __init__(
        self,
        *,
        registry: StrategyRegistry,
        fetcher: DocumentFetcher,
        settings: CrawlerSettings,
        renderer: DynamicContentRenderer | None = None,
    ) -> None:
        self.registry = registry
        self.fetcher = fetcher
        self.settings = settings
        self.renderer = renderer

    def resolve(self, url: str) -> MarketplaceStrategy:
        return self.registry.resolve(url)

    def load_listing(self, url: str, strategy: MarketplaceStrategy) -> PageDocument:
        if strategy.uses_infinite_scroll and self.renderer is not None:
            log_event(
                logger,
                logging.INFO,
                "listing_render_requested",
                source=strategy.source.value,
                url=url,
            )
            return self.renderer.render(url, strategy.listing.items)
        return self.fetcher.fetch(url, strategy=strategy, context="listing")
