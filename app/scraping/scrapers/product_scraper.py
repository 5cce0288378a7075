"""
Product detail and product listing scraper.
"""

from __future__ import annotations

import logging

from app.scraping.base import ScraperBase
from app.scraping.errors import FetchBlockedError, FetchError, RenderError
from app.scraping.logging_utils import log_event
from app.scraping.parsing import extract_items, extract_product_from_detail, extract_products
from app.scraping.types import ScrapedProduct

logger = logging.getLogger(__name__)


class ProductScraper(ScraperBase):
    """
    Reads product detail pages and flat product listings.
    """

    def scrape_product(self, url: str) -> ScrapedProduct | None:
        """
        Scrape one product detail page, or None when it cannot be read.
        """

        strategy = self.resolve(url)
        try:
            document = self.fetcher.fetch(url, strategy=strategy, context="detail")
        except FetchBlockedError as exc:
            log_event(
                logger,
                logging.WARNING,
                "product_fetch_blocked",
                source=strategy.source.value,
                url=url,
                reason=str(exc),
            )
            return None
        except FetchError as exc:
            log_event(
                logger,
                logging.ERROR,
                "product_fetch_failed",
                source=strategy.source.value,
                url=url,
                status_code=exc.status_code,
                error=str(exc),
            )
            return None

        product = extract_product_from_detail(document.soup, url, strategy)
        if product is not None:
            log_event(
                logger,
                logging.INFO,
                "product_scraped",
                source=strategy.source.value,
                sku=product.sku,
                url=url,
            )
        return product

    def scrape_products_page(self, url: str) -> list[ScrapedProduct]:
        """
        Every valid product of one listing page; empty on failure.
        """

        strategy = self.resolve(url)
        try:
            document = self.load_listing(url, strategy)
        except (FetchError, RenderError) as exc:
            log_event(
                logger,
                logging.ERROR,
                "products_page_failed",
                source=strategy.source.value,
                url=url,
                error=str(exc),
            )
            return []

        items = extract_items(document.soup, strategy.listing.items)
        return extract_products(
            items,
            strategy,
            seen_skus=set(),
            page_url=document.url,
            synthetic_sku_mode=self.settings.synthetic_sku_mode,
        )
