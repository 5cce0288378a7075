"""
app/domain package marker.
"""

from app.domain.marketplace import (
    CategoryCrawlSummary,
    CategoryRecord,
    CategoryStatus,
    MarketplaceSource,
    ProductCrawlSummary,
)

__all__ = [
    "CategoryCrawlSummary",
    "CategoryRecord",
    "CategoryStatus",
    "MarketplaceSource",
    "ProductCrawlSummary",
]
