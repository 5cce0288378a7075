"""
HTML extraction layer exports.
"""

from app.scraping.parsing.category_title import extract_category_title
from app.scraping.parsing.items import count_items, extract_items
from app.scraping.parsing.pagination import (
    detect_total_pages,
    extract_current_page,
    page_url,
    total_pages_from_caption,
    total_pages_from_product_count,
)
from app.scraping.parsing.product_list import (
    extract_product_from_detail,
    extract_product_from_listing,
    extract_products,
    synthesize_sku,
)

__all__ = [
    "count_items",
    "detect_total_pages",
    "extract_category_title",
    "extract_current_page",
    "extract_items",
    "extract_product_from_detail",
    "extract_product_from_listing",
    "extract_products",
    "page_url",
    "synthesize_sku",
    "total_pages_from_caption",
    "total_pages_from_product_count",
]
