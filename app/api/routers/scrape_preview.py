"""
app/api/routers/scrape_preview.py

Read-only scrape endpoints that return extracted data without storing it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas.crawl import (
    ScrapedCategoryPageResponse,
    ScrapedProductResponse,
    ScrapedProductsResponse,
)
from app.scraping.errors import StrategyNotFoundError
from app.services.crawl_service import CrawlService, get_crawl_service

router = APIRouter(prefix="/scrape-preview", tags=["scrape-preview"])


@router.get("/product", response_model=ScrapedProductResponse)
def preview_product(
    url: str = Query(..., min_length=1, description="Product detail URL"),
    crawl_service: CrawlService = Depends(get_crawl_service),
) -> ScrapedProductResponse:
    try:
        product = crawl_service.preview_product(url)
    except StrategyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No product could be extracted from {url}",
        )
    return ScrapedProductResponse.from_product(product)


@router.get("/products", response_model=ScrapedProductsResponse)
def preview_products(
    url: str = Query(..., min_length=1, description="Product listing URL"),
    crawl_service: CrawlService = Depends(get_crawl_service),
) -> ScrapedProductsResponse:
    try:
        products = crawl_service.preview_products(url)
    except StrategyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ScrapedProductsResponse(
        url=url,
        total_products=len(products),
        products=[ScrapedProductResponse.from_product(product) for product in products],
    )


@router.get("/category", response_model=ScrapedCategoryPageResponse)
def preview_category(
    url: str = Query(..., min_length=1, description="Category listing URL"),
    crawl_service: CrawlService = Depends(get_crawl_service),
) -> ScrapedCategoryPageResponse:
    try:
        page = crawl_service.preview_category(url)
    except StrategyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if page is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Category page could not be loaded: {url}",
        )
    return ScrapedCategoryPageResponse.from_page(url=url, page=page)
