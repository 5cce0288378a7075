"""
Storage layer exports.
"""

from app.scraping.storage.base import CrawlStorage
from app.scraping.storage.sqlalchemy_storage import SQLAlchemyCrawlStorage

__all__ = ["CrawlStorage", "SQLAlchemyCrawlStorage"]
