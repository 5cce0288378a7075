"""
app/schemas/crawl.py

Request and response schemas for crawl and scrape-preview operations.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from app.domain.marketplace import CategoryCrawlSummary, ProductCrawlSummary
from app.scraping.types import ScrapedCategoryPage, ScrapedProduct


class CategoryCrawlRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Category listing URL")


class CategoryPageCrawlRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Category listing URL as first crawled")
    page: int = Field(..., ge=1, description="Page number to crawl")


class ProductCrawlRequest(BaseModel):
    urls: list[str] = Field(..., min_length=1, description="Product detail URLs")


class CategoryCrawlSummaryResponse(BaseModel):
    """
    API response model for one category crawl.
    """

    category_url: str
    source: str
    status: str
    total_pages: int = Field(..., ge=0)
    pages_crawled: int = Field(..., ge=0)
    failed_pages: int = Field(..., ge=0)
    products_scraped: int = Field(..., ge=0)
    products_inserted: int = Field(..., ge=0)
    products_in_category: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: CategoryCrawlSummary) -> "CategoryCrawlSummaryResponse":
        return cls(
            category_url=summary.category_url,
            source=summary.source.value,
            status=summary.status,
            total_pages=summary.total_pages,
            pages_crawled=summary.pages_crawled,
            failed_pages=summary.failed_pages,
            products_scraped=summary.products_scraped,
            products_inserted=summary.products_inserted,
            products_in_category=summary.products_in_category,
            errors=summary.errors,
        )


class ProductCrawlSummaryResponse(BaseModel):
    requested: int = Field(..., ge=0)
    created: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: ProductCrawlSummary) -> "ProductCrawlSummaryResponse":
        return cls(
            requested=summary.requested,
            created=summary.created,
            updated=summary.updated,
            failed=summary.failed,
            errors=summary.errors,
        )


class ScrapedProductResponse(BaseModel):
    sku: str
    name: str
    source: str
    current_price: Decimal | None = None
    previous_price: Decimal | None = None
    images: list[str] = Field(default_factory=list)
    available: bool = True
    source_url: str | None = None

    @classmethod
    def from_product(cls, product: ScrapedProduct) -> "ScrapedProductResponse":
        return cls(**product.to_dict())


class ScrapedProductsResponse(BaseModel):
    url: str
    total_products: int = Field(..., ge=0)
    products: list[ScrapedProductResponse] = Field(default_factory=list)


class ScrapedCategoryPageResponse(BaseModel):
    url: str
    name: str
    breadcrumb: str
    total_pages: int = Field(..., ge=1)
    current_page: int = Field(..., ge=1)
    products_per_page: int = Field(..., ge=0)
    total_products: int = Field(..., ge=0)
    products: list[ScrapedProductResponse] = Field(default_factory=list)

    @classmethod
    def from_page(cls, *, url: str, page: ScrapedCategoryPage) -> "ScrapedCategoryPageResponse":
        return cls(
            url=url,
            name=page.name,
            breadcrumb=page.breadcrumb,
            total_pages=page.total_pages,
            current_page=page.current_page,
            products_per_page=page.products_per_page,
            total_products=len(page.products),
            products=[ScrapedProductResponse.from_product(product) for product in page.products],
        )
