"""
Run a marketplace category or product crawl from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from app.scraping.errors import StrategyNotFoundError
from app.services.crawl_service import CrawlService
from db.session import SessionLocal


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Crawl marketplace categories or products.")
    parser.add_argument("url", nargs="+", help="Category URL, or product URLs with --products.")
    parser.add_argument(
        "--page",
        dest="page",
        type=int,
        default=None,
        help="Crawl only this page of an already crawled category.",
    )
    parser.add_argument(
        "--products",
        dest="products",
        action="store_true",
        help="Treat the URLs as product detail pages.",
    )
    args = parser.parse_args()
    _configure_logging()

    service = CrawlService()
    try:
        with SessionLocal() as db:
            if args.products:
                summary = service.crawl_products(db=db, urls=args.url)
                payload = {
                    "requested": summary.requested,
                    "created": summary.created,
                    "updated": summary.updated,
                    "failed": summary.failed,
                    "errors": summary.errors,
                }
            else:
                payload = [_crawl_category(service, db, url, args.page) for url in args.url]
    except StrategyNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    finally:
        service.close()

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def _crawl_category(service: CrawlService, db, url: str, page: int | None) -> dict:
    if page is not None:
        summary = service.crawl_category_page(db=db, url=url, page_number=page)
        if summary is None:
            return {"category_url": url, "status": "failed", "errors": ["category not crawled yet"]}
    else:
        summary = service.crawl_category(db=db, url=url)

    return {
        "category_url": summary.category_url,
        "source": summary.source.value,
        "status": summary.status,
        "total_pages": summary.total_pages,
        "pages_crawled": summary.pages_crawled,
        "failed_pages": summary.failed_pages,
        "products_scraped": summary.products_scraped,
        "products_inserted": summary.products_inserted,
        "products_in_category": summary.products_in_category,
        "errors": summary.errors,
    }


if __name__ == "__main__":
    raise SystemExit(main())
