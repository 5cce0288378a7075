"""
Scraper exports.
"""

from app.scraping.scrapers.category_scraper import CategoryScraper
from app.scraping.scrapers.product_scraper import ProductScraper

__all__ = ["CategoryScraper", "ProductScraper"]
