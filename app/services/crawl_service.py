"""
app/services/crawl_service.py

Service orchestration for marketplace crawling and scrape previews.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import lru_cache

from sqlalchemy.orm import Session

from app.domain.marketplace import CategoryCrawlSummary, ProductCrawlSummary
from app.scraping.config import get_crawler_settings
from app.scraping.config.models import CrawlerSettings
from app.scraping.engine import MarketplaceCrawlEngine
from app.scraping.fetcher import DocumentFetcher
from app.scraping.registry import StrategyRegistry
from app.scraping.renderer import DynamicContentRenderer
from app.scraping.scrapers import CategoryScraper, ProductScraper
from app.scraping.storage import SQLAlchemyCrawlStorage
from app.scraping.types import ScrapedCategoryPage, ScrapedProduct

logger = logging.getLogger(__name__)


class CrawlService:
    """
    Owns the long-lived crawl collaborators and builds a crawl engine per
    database session.
    """

    def __init__(
        self,
        *,
        settings: CrawlerSettings | None = None,
        registry: StrategyRegistry | None = None,
        fetcher: DocumentFetcher | None = None,
        renderer: DynamicContentRenderer | None = None,
    ) -> None:
        self._settings = settings or get_crawler_settings()
        self._registry = registry or StrategyRegistry.from_config(config_path=self._settings.config_path)
        self._fetcher = fetcher or DocumentFetcher(settings=self._settings)
        if renderer is None and self._settings.renderer_enabled:
            renderer = DynamicContentRenderer(settings=self._settings)
        self._renderer = renderer

        scraper_kwargs = {
            "registry": self._registry,
            "fetcher": self._fetcher,
            "settings": self._settings,
            "renderer": self._renderer,
        }
        self.category_scraper = CategoryScraper(**scraper_kwargs)
        self.product_scraper = ProductScraper(**scraper_kwargs)

    def engine(self, *, db: Session) -> MarketplaceCrawlEngine:
        storage = SQLAlchemyCrawlStorage(
            session=db,
            batch_size=self._settings.storage_batch_size,
        )
        return MarketplaceCrawlEngine(
            storage=storage,
            category_scraper=self.category_scraper,
            product_scraper=self.product_scraper,
        )

    def crawl_category(self, *, db: Session, url: str) -> CategoryCrawlSummary:
        return self.engine(db=db).crawl_category(url)

    def crawl_category_page(
        self,
        *,
        db: Session,
        url: str,
        page_number: int,
    ) -> CategoryCrawlSummary | None:
        return self.engine(db=db).crawl_category_page(url, page_number)

    def crawl_products(self, *, db: Session, urls: Sequence[str]) -> ProductCrawlSummary:
        return self.engine(db=db).crawl_products(urls)

    def preview_product(self, url: str) -> ScrapedProduct | None:
        return self.product_scraper.scrape_product(url)

    def preview_products(self, url: str) -> list[ScrapedProduct]:
        return self.product_scraper.scrape_products_page(url)

    def preview_category(self, url: str) -> ScrapedCategoryPage | None:
        return self.category_scraper.scrape_category_page(url)

    def close(self) -> None:
        if self._renderer is not None:
            self._renderer.shutdown()
        self._fetcher.close()
        logger.info("Crawl service resources released")


@lru_cache(maxsize=1)
def get_crawl_service() -> CrawlService:
    """
    Build and cache the crawl service.
    """

    return CrawlService()
