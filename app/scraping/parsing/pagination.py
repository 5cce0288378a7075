"""
Page-count detection for category listings.

Three paradigms are covered: explicit page links, "page X of Y" captions,
and lazy-loaded "shown N of M" item counters.
"""

from __future__ import annotations

import logging
import math
import re

from bs4 import BeautifulSoup, Tag

from app.scraping.parsing.dom import node_text, select_first, split_selectors

logger = logging.getLogger(__name__)

PAGINATION_AREA_SELECTOR = ".pagination, [class*='page'], nav[aria-label*='paginación']"
LAST_PAGINATION_LINK_SELECTOR = ".pagination li:last-child a, [class*='page'] a:last-child"

PAGE_OF_PATTERN = re.compile(r"(?:página|pagina|page)\s*(\d+)\s*(?:de|of)\s*(\d+)", re.IGNORECASE)
SHOWN_OF_PATTERN = re.compile(
    r"(?:visto|mostrado|shown|showing)?\s*(\d+)\s*(?:de|of)\s*(\d+)\s*(?:productos|results|items)?",
    re.IGNORECASE,
)
CURRENT_PAGE_PATTERN = re.compile(r"[?&]page=(\d+)")
_NON_DIGITS = re.compile(r"[^0-9]")
_INTEGER = re.compile(r"\d+")
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d)[.,](?=\d{3}(?!\d))")


def detect_total_pages(doc: BeautifulSoup | Tag, selector: str | None) -> int:
    """
    Total number of listing pages, never less than one.
    """

    total = _from_selector(doc, selector)
    if total is not None:
        logger.debug("Total pages from primary selector: %s", total)
        return total

    total = _from_pagination_text(doc)
    if total is not None:
        logger.debug("Total pages from pagination caption: %s", total)
        return total

    total = _from_last_pagination_link(doc)
    if total is not None:
        logger.debug("Total pages from last pagination link: %s", total)
        return total

    logger.warning("No pagination detected, assuming a single page")
    return 1


def total_pages_from_product_count(
    doc: BeautifulSoup | Tag,
    selector: str | None,
    products_per_page: int,
) -> int | None:
    """
    Page count derived from a lazy-load counter node such as
    "Has visto 30 de 1029 productos".
    """

    if products_per_page <= 0:
        return None
    for part in split_selectors(selector):
        node = select_first(doc, part)
        if node is not None:
            return total_pages_from_caption(node_text(node), products_per_page)
    return None


def total_pages_from_caption(text: str | None, products_per_page: int) -> int | None:
    if products_per_page <= 0 or not text:
        return None

    # "1.029" and "1,029" are one number
    text = _THOUSANDS_SEPARATOR.sub("", text)
    match = SHOWN_OF_PATTERN.search(text)
    if match:
        shown, total = int(match.group(1)), int(match.group(2))
        pages = math.ceil(total / products_per_page)
        logger.info(
            "Lazy-load counter: %s of %s products -> %s pages (%s per page)",
            shown,
            total,
            pages,
            products_per_page,
        )
        return pages

    numbers = [int(token) for token in _INTEGER.findall(text)]
    largest = max(numbers, default=0)
    if largest == 0:
        return None
    pages = math.ceil(largest / products_per_page)
    logger.info(
        "Counter fallback: %s products / %s per page -> %s pages",
        largest,
        products_per_page,
        pages,
    )
    return pages


def extract_current_page(url: str | None) -> int:
    if not url:
        return 1
    match = CURRENT_PAGE_PATTERN.search(url)
    if match:
        return max(1, int(match.group(1)))
    return 1


def page_url(url: str, page_number: int) -> str:
    """
    URL of one listing page, appending or replacing the `page` query param.
    """

    if CURRENT_PAGE_PATTERN.search(url):
        return CURRENT_PAGE_PATTERN.sub(lambda match: f"{match.group(0)[0]}page={page_number}", url, count=1)
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}page={page_number}"


def _from_selector(doc: BeautifulSoup | Tag, selector: str | None) -> int | None:
    for part in split_selectors(selector):
        node = select_first(doc, part)
        if node is not None:
            return _parse_page_number(node_text(node))
    return None


def _from_pagination_text(doc: BeautifulSoup | Tag) -> int | None:
    area = select_first(doc, PAGINATION_AREA_SELECTOR)
    if area is None:
        return None
    match = PAGE_OF_PATTERN.search(node_text(area).lower())
    if match is None:
        return None
    return _positive(int(match.group(2)))


def _from_last_pagination_link(doc: BeautifulSoup | Tag) -> int | None:
    link = select_first(doc, LAST_PAGINATION_LINK_SELECTOR)
    if link is None:
        return None
    return _parse_page_number(node_text(link))


def _parse_page_number(text: str) -> int | None:
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        return None
    return _positive(int(digits))


def _positive(value: int) -> int | None:
    return value if value > 0 else None
