"""
Field extractors for product nodes and product detail pages.

Every extractor returns a value or None. A missing optional field is never
an exception.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from decimal import Decimal, InvalidOperation

from bs4 import BeautifulSoup, Tag

from app.scraping.parsing.dom import (
    attr,
    first_link,
    node_text,
    select_all,
    select_first,
    split_selectors,
)

logger = logging.getLogger(__name__)

DEFAULT_SKU_URL_PATTERNS: tuple[str, ...] = (r"/p/(MLA\d+)", r"/(MLA\d+)")
RETAILER_ITEM_META = "meta[property='product:retailer_item_id']"

NEGATIVE_STOCK_KEYWORDS: tuple[str, ...] = ("agotado", "sin stock", "sold out", "out of stock", "no stock")
DETAIL_NEGATIVE_STOCK_KEYWORDS: tuple[str, ...] = (*NEGATIVE_STOCK_KEYWORDS, "no disponible")
DEFAULT_BUY_BUTTON_SELECTOR = (
    "button[data-testid='buy-now-button'], .ui-pdp-action-primary, .andes-button--loud"
)

LISTING_IMAGE_EXCLUDED_TOKENS: tuple[str, ...] = ("logo", "icon")
DETAIL_IMAGE_EXCLUDED_TOKENS: tuple[str, ...] = ("frontend", "assets", "logo", "icon", "cockade")
DETAIL_IMAGE_FALLBACK_SELECTOR = "img[data-src], img[src]"
DETAIL_IMAGE_MIN_URL_LENGTH = 50
DETAIL_IMAGE_LIMIT = 20

_NON_DIGITS = re.compile(r"[^0-9]")


# ---------------------------------------------------------------------------
# Identifier
# ---------------------------------------------------------------------------


def extract_sku_from_listing(
    item: Tag,
    *,
    attributes: Sequence[str] = ("data-sku",),
    url_patterns: Sequence[str] = DEFAULT_SKU_URL_PATTERNS,
) -> str | None:
    """
    Identifier for one listing node: data attributes first, then the link URL.
    """

    for name in attributes:
        value = attr(item, name)
        if value:
            return value

    link = first_link(item)
    if link is None:
        return None
    return extract_sku_from_url(attr(link, "href"), url_patterns=url_patterns)


def extract_sku_from_url(
    url: str | None,
    *,
    url_patterns: Sequence[str] = DEFAULT_SKU_URL_PATTERNS,
) -> str | None:
    if not url:
        return None
    for pattern in url_patterns or DEFAULT_SKU_URL_PATTERNS:
        match = re.search(pattern, url)
        if match:
            return match.group(1)
    return None


def extract_sku_from_dom(doc: BeautifulSoup | Tag) -> str | None:
    meta = select_first(doc, RETAILER_ITEM_META)
    if meta is not None:
        content = attr(meta, "content")
        if content:
            return content

    item = select_first(doc, "[data-item-id]")
    if item is not None:
        return attr(item, "data-item-id") or None
    return None


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------


def extract_title(node: Tag, primary: str | None, *fallbacks: str) -> str | None:
    """
    First non-blank text across the primary chain, then the fallbacks.
    """

    for selector in [*split_selectors(primary), *fallbacks]:
        text = node_text(select_first(node, selector))
        if text:
            return text

    logger.debug("No title found with selectors primary=%r fallbacks=%r", primary, fallbacks)
    return None


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


def extract_price(node: Tag, selector: str | None) -> Decimal | None:
    """
    First positive price across the selector chain.

    Zero counts as not found so "$0" placeholders fall through to the next
    selector.
    """

    for part in split_selectors(selector):
        price = parse_price(node_text(select_first(node, part)))
        if price is not None and price > 0:
            return price
    return None


def parse_price(text: str | None) -> Decimal | None:
    if not text:
        return None
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        return None
    try:
        return Decimal(digits)
    except InvalidOperation:
        return None


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def extract_images_from_listing(item: Tag, selector: str | None) -> list[str]:
    """
    Every usable image URL of a listing node, uncapped.
    """

    nodes: list[Tag] = []
    for part in split_selectors(selector or "img"):
        nodes.extend(select_all(item, part))
    return _filter_images(
        (_image_url(node) for node in nodes),
        excluded_tokens=LISTING_IMAGE_EXCLUDED_TOKENS,
    )


def extract_images_from_detail(
    doc: BeautifulSoup | Tag,
    selector: str | None,
    *,
    limit: int = DETAIL_IMAGE_LIMIT,
) -> list[str]:
    """
    Gallery images of a detail page, with a generic fallback and a cap.
    """

    nodes: list[Tag] = []
    for part in split_selectors(selector):
        nodes.extend(select_all(doc, part))
    if not nodes:
        for part in split_selectors(DETAIL_IMAGE_FALLBACK_SELECTOR):
            nodes.extend(select_all(doc, part))

    images = _filter_images(
        (_image_url(node) for node in nodes),
        excluded_tokens=DETAIL_IMAGE_EXCLUDED_TOKENS,
        min_length=DETAIL_IMAGE_MIN_URL_LENGTH,
    )
    return images[: max(0, limit)]


def _image_url(node: Tag) -> str:
    return attr(node, "data-src") or attr(node, "src")


def _filter_images(
    urls: Iterable[str],
    *,
    excluded_tokens: Sequence[str],
    min_length: int = 0,
) -> list[str]:
    seen: set[str] = set()
    images: list[str] = []
    for url in urls:
        if not url.startswith(("http://", "https://")):
            continue
        if any(token in url for token in excluded_tokens):
            continue
        if len(url) <= min_length:
            continue
        if url in seen:
            continue
        seen.add(url)
        images.append(url)
    return images


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


def is_available_in_listing(item: Tag) -> bool:
    text = node_text(item).lower()
    return not _contains_any(text, NEGATIVE_STOCK_KEYWORDS)


def is_available_in_detail(doc: BeautifulSoup | Tag, buy_button_selector: str | None = None) -> bool:
    """
    Available when the page has no out-of-stock wording and shows a usable
    purchase control.
    """

    page_text = node_text(doc).lower()
    if _contains_any(page_text, DETAIL_NEGATIVE_STOCK_KEYWORDS):
        return False

    button = None
    for part in split_selectors(buy_button_selector or DEFAULT_BUY_BUTTON_SELECTOR):
        button = select_first(doc, part)
        if button is not None:
            break
    if button is None:
        return False
    return not _contains_any(node_text(button).lower(), NEGATIVE_STOCK_KEYWORDS)


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)
