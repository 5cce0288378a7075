"""
app/schemas package marker.
"""

from app.schemas.crawl import (
    CategoryCrawlRequest,
    CategoryCrawlSummaryResponse,
    CategoryPageCrawlRequest,
    ProductCrawlRequest,
    ProductCrawlSummaryResponse,
    ScrapedCategoryPageResponse,
    ScrapedProductResponse,
    ScrapedProductsResponse,
)

__all__ = [
    "CategoryCrawlRequest",
    "CategoryCrawlSummaryResponse",
    "CategoryPageCrawlRequest",
    "ProductCrawlRequest",
    "ProductCrawlSummaryResponse",
    "ScrapedCategoryPageResponse",
    "ScrapedProductResponse",
    "ScrapedProductsResponse",
]
