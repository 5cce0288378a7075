"""
app/api/routers package marker.
"""

from app.api.routers.crawl import router as crawl_router
from app.api.routers.scrape_preview import router as scrape_preview_router

__all__ = [
    "crawl_router",
    "scrape_preview_router",
]
