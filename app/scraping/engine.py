"""
Marketplace crawl engine.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.domain.marketplace import (
    CategoryCrawlSummary,
    CategoryRecord,
    MarketplaceSource,
    ProductCrawlSummary,
)
from app.scraping.config.models import MarketplaceStrategy
from app.scraping.logging_utils import log_event
from app.scraping.parsing import page_url
from app.scraping.scrapers import CategoryScraper, ProductScraper
from app.scraping.storage import CrawlStorage
from app.scraping.types import ScrapedCategoryPage

logger = logging.getLogger(__name__)


class MarketplaceCrawlEngine:
    """
    Orchestrates category and product crawls and their persistence.

    Per-item failures stay inside the extractors and per-page failures stay
    inside a crawl. Only an unsupported URL aborts a call.
    """

    def __init__(
        self,
        *,
        storage: CrawlStorage,
        category_scraper: CategoryScraper,
        product_scraper: ProductScraper,
    ) -> None:
        self._storage = storage
        self._category_scraper = category_scraper
        self._product_scraper = product_scraper

    def crawl_category(self, url: str) -> CategoryCrawlSummary:
        strategy = self._category_scraper.resolve(url)
        source = strategy.source

        first_page = self._category_scraper.scrape_category_page(url)
        if first_page is None:
            message = f"page=1 url={url} error=first page unavailable"
            existing = self._storage.find_category(url)
            if existing is not None:
                self._storage.mark_category_error(existing.id, error=message)
            log_event(logger, logging.ERROR, "category_crawl_failed", source=source.value, url=url)
            return _failed_summary(url, source, [message])

        category: CategoryRecord | None = None
        try:
            category = self._storage.upsert_category(first_page, source_url=url, source=source)
            seen_skus = self._storage.existing_skus(category.id)
            total_pages = self._pages_to_crawl(first_page, strategy)

            scraped = len(first_page.products)
            inserted = self._store_page(first_page, category, seen_skus)
            pages_crawled = 1
            failed_pages = 0
            errors: list[str] = []

            for page_number in range(2, total_pages + 1):
                paged_url = page_url(url, page_number)
                try:
                    page = self._category_scraper.scrape_category_page(paged_url)
                except Exception as exc:
                    failed_pages += 1
                    errors.append(f"page={page_number} url={paged_url} error={exc}")
                    log_event(
                        logger,
                        logging.WARNING,
                        "category_page_failed",
                        source=source.value,
                        url=paged_url,
                        page=page_number,
                        error=str(exc),
                    )
                    continue
                if page is None:
                    failed_pages += 1
                    errors.append(f"page={page_number} url={paged_url} error=page unavailable")
                    continue
                pages_crawled += 1
                scraped += len(page.products)
                inserted += self._store_page(page, category, seen_skus)

            in_category = self._storage.count_products(category.id)
            self._storage.mark_category_complete(category.id, total_products=in_category)
        except Exception as exc:
            message = str(exc)
            if category is not None:
                self._storage.mark_category_error(category.id, error=message)
            log_event(
                logger,
                logging.ERROR,
                "category_crawl_failed",
                source=source.value,
                url=url,
                error=message,
            )
            return _failed_summary(url, source, [message])

        summary = CategoryCrawlSummary(
            category_url=url,
            source=source,
            status="success" if failed_pages == 0 else "partial_success",
            total_pages=total_pages,
            pages_crawled=pages_crawled,
            failed_pages=failed_pages,
            products_scraped=scraped,
            products_inserted=inserted,
            products_in_category=in_category,
            errors=errors,
        )
        log_event(
            logger,
            logging.INFO,
            "category_crawl_completed",
            source=source.value,
            url=url,
            category=category.name,
            total_pages=summary.total_pages,
            pages_crawled=summary.pages_crawled,
            failed_pages=summary.failed_pages,
            products_inserted=summary.products_inserted,
            products_in_category=summary.products_in_category,
        )
        return summary

    def crawl_category_page(self, url: str, page_number: int) -> CategoryCrawlSummary | None:
        """
        Crawl one extra page of an already stored category.

        Returns None when the category has not been crawled before.
        """

        strategy = self._category_scraper.resolve(url)
        category = self._storage.find_category(url)
        if category is None:
            log_event(logger, logging.WARNING, "category_not_found", url=url, page=page_number)
            return None

        paged_url = page_url(url, page_number) if page_number > 1 else url
        page = self._category_scraper.scrape_category_page(paged_url)
        if page is None:
            return CategoryCrawlSummary(
                category_url=url,
                source=strategy.source,
                status="failed",
                total_pages=category.total_pages,
                pages_crawled=0,
                failed_pages=1,
                products_scraped=0,
                products_inserted=0,
                products_in_category=self._storage.count_products(category.id),
                errors=[f"page={page_number} url={paged_url} error=page unavailable"],
            )

        inserted = self._store_page(page, category, self._storage.existing_skus(category.id))
        return CategoryCrawlSummary(
            category_url=url,
            source=strategy.source,
            status="success",
            total_pages=category.total_pages,
            pages_crawled=1,
            failed_pages=0,
            products_scraped=len(page.products),
            products_inserted=inserted,
            products_in_category=self._storage.count_products(category.id),
        )

    def crawl_product(self, url: str) -> ProductCrawlSummary:
        self._product_scraper.resolve(url)
        return self.crawl_products([url])

    def crawl_products(self, urls: Sequence[str]) -> ProductCrawlSummary:
        """
        Scrape and upsert product detail pages. One bad URL never stops the
        batch; unsupported URLs are reported as failures.
        """

        created = 0
        updated = 0
        errors: list[str] = []
        for url in urls:
            try:
                product = self._product_scraper.scrape_product(url)
                if product is None:
                    errors.append(f"url={url} error=product unavailable")
                    continue
                if self._storage.upsert_product(product):
                    created += 1
                else:
                    updated += 1
            except Exception as exc:
                errors.append(f"url={url} error={exc}")
                log_event(logger, logging.ERROR, "product_crawl_failed", url=url, error=str(exc))

        summary = ProductCrawlSummary(
            requested=len(urls),
            created=created,
            updated=updated,
            failed=len(errors),
            errors=errors,
        )
        log_event(
            logger,
            logging.INFO,
            "product_crawl_completed",
            requested=summary.requested,
            created=summary.created,
            updated=summary.updated,
            failed=summary.failed,
        )
        return summary

    @staticmethod
    def _pages_to_crawl(first_page: ScrapedCategoryPage, strategy: MarketplaceStrategy) -> int:
        if strategy.uses_infinite_scroll:
            return 1
        return first_page.total_pages

    def _store_page(
        self,
        page: ScrapedCategoryPage,
        category: CategoryRecord,
        seen_skus: set[str],
    ) -> int:
        new_products = []
        for product in page.products:
            if product.sku in seen_skus:
                continue
            seen_skus.add(product.sku)
            new_products.append(product)

        if not new_products:
            logger.info("No new products on page %s of category %s", page.current_page, category.name)
            return 0
        return self._storage.save_products(new_products, category_id=category.id)


def _failed_summary(url: str, source: MarketplaceSource, errors: list[str]) -> CategoryCrawlSummary:
    return CategoryCrawlSummary(
        category_url=url,
        source=source,
        status="failed",
        total_pages=0,
        pages_crawled=0,
        failed_pages=1,
        products_scraped=0,
        products_inserted=0,
        products_in_category=0,
        errors=errors,
    )
