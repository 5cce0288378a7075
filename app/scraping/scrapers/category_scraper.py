"""
Category listing scraper.
"""

from __future__ import annotations

import logging

from app.scraping.base import ScraperBase
from app.scraping.config.models import MarketplaceStrategy
from app.scraping.errors import FetchError, RenderError
from app.scraping.logging_utils import log_event
from app.scraping.parsing import (
    detect_total_pages,
    extract_category_title,
    extract_current_page,
    extract_items,
    extract_products,
    total_pages_from_product_count,
)
from app.scraping.types import PageDocument, ScrapedCategoryPage

logger = logging.getLogger(__name__)


class CategoryScraper(ScraperBase):
    """
    Reads one category listing page into a ScrapedCategoryPage.
    """

    def scrape_category_page(self, url: str) -> ScrapedCategoryPage | None:
        """
        Scrape one listing page.

        Unknown sources raise StrategyNotFoundError. Fetch and render failures
        are logged and yield None.
        """

        strategy = self.resolve(url)
        try:
            document = self.load_listing(url, strategy)
        except (FetchError, RenderError) as exc:
            log_event(
                logger,
                logging.ERROR,
                "category_page_unavailable",
                source=strategy.source.value,
                url=url,
                error=str(exc),
            )
            return None

        return self.extract_category_page(document, strategy)

    def extract_category_page(
        self,
        document: PageDocument,
        strategy: MarketplaceStrategy,
    ) -> ScrapedCategoryPage:
        soup = document.soup
        name = extract_category_title(soup, strategy.category.title)
        if not name:
            name = f"Categoría {strategy.source.value}"
            logger.warning("Category title not found, using fallback name=%s", name)

        items = extract_items(soup, strategy.listing.items)
        products = extract_products(
            items,
            strategy,
            seen_skus=set(),
            page_url=document.url,
            synthetic_sku_mode=self.settings.synthetic_sku_mode,
        )

        total_pages = self._total_pages(document, strategy)
        page = ScrapedCategoryPage(
            name=name,
            breadcrumb=f"{strategy.source.value} > {name}",
            total_pages=total_pages,
            products_per_page=len(items),
            current_page=extract_current_page(document.url),
            products=tuple(products),
        )
        log_event(
            logger,
            logging.INFO,
            "category_page_scraped",
            source=strategy.source.value,
            url=document.url,
            category=name,
            items=len(items),
            products=len(products),
            total_pages=page.total_pages,
            current_page=page.current_page,
        )
        return page

    def detect_total_pages(self, url: str) -> int:
        """
        Page count of a category, 1 when the page cannot be loaded.
        """

        strategy = self.resolve(url)
        try:
            document = self.load_listing(url, strategy)
        except (FetchError, RenderError) as exc:
            log_event(
                logger,
                logging.WARNING,
                "total_pages_unavailable",
                source=strategy.source.value,
                url=url,
                error=str(exc),
            )
            return 1
        return self._total_pages(document, strategy)

    @staticmethod
    def _total_pages(document: PageDocument, strategy: MarketplaceStrategy) -> int:
        if strategy.uses_infinite_scroll:
            return 1

        total = detect_total_pages(document.soup, strategy.category.pagination)
        if total > 1 or not strategy.category.total_products:
            return total

        from_counter = total_pages_from_product_count(
            document.soup,
            strategy.category.total_products,
            strategy.products_per_page,
        )
        return from_counter if from_counter and from_counter > 1 else total
