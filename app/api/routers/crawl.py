"""
app/api/routers/crawl.py

Category and product crawl endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.schemas.crawl import (
    CategoryCrawlRequest,
    CategoryCrawlSummaryResponse,
    CategoryPageCrawlRequest,
    ProductCrawlRequest,
    ProductCrawlSummaryResponse,
)
from app.scraping.errors import StrategyNotFoundError
from app.services.crawl_service import CrawlService, get_crawl_service
from db.session import get_db

router = APIRouter(prefix="/crawl", tags=["crawl"])


@router.post("/category", response_model=CategoryCrawlSummaryResponse)
def crawl_category(
    payload: CategoryCrawlRequest,
    db: Session = Depends(get_db),
    crawl_service: CrawlService = Depends(get_crawl_service),
) -> CategoryCrawlSummaryResponse:
    """
    Crawl every page of a category and store its products.
    """

    try:
        summary = crawl_service.crawl_category(db=db, url=payload.url)
    except StrategyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CategoryCrawlSummaryResponse.from_summary(summary)


@router.post("/category/page", response_model=CategoryCrawlSummaryResponse)
def crawl_category_page(
    payload: CategoryPageCrawlRequest,
    db: Session = Depends(get_db),
    crawl_service: CrawlService = Depends(get_crawl_service),
) -> CategoryCrawlSummaryResponse:
    try:
        summary = crawl_service.crawl_category_page(db=db, url=payload.url, page_number=payload.page)
    except StrategyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category not crawled yet: {payload.url}",
        )
    return CategoryCrawlSummaryResponse.from_summary(summary)


@router.post("/products", response_model=ProductCrawlSummaryResponse)
def crawl_products(
    payload: ProductCrawlRequest,
    db: Session = Depends(get_db),
    crawl_service: CrawlService = Depends(get_crawl_service),
) -> ProductCrawlSummaryResponse:
    """
    Scrape product detail pages and upsert them by (sku, source).
    """

    summary = crawl_service.crawl_products(db=db, urls=payload.urls)
    return ProductCrawlSummaryResponse.from_summary(summary)
