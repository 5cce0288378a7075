"""
Turns located product nodes into validated ScrapedProduct records.

Selector sets come from the MarketplaceStrategy; the control flow is the same
for every source. The only per-source branches are the synthetic identifier
fallback and the listing-URL fallback, both driven by strategy flags.
"""

from __future__ import annotations

import hashlib
import logging
import random
import re
import time
import uuid
import zlib
from collections.abc import Iterable, MutableSet
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from app.scraping.config.models import MarketplaceStrategy
from app.scraping.errors import ProductValidationError
from app.scraping.logging_utils import log_event
from app.scraping.parsing.dom import attr, clean_text, first_link
from app.scraping.parsing.fields import (
    extract_images_from_detail,
    extract_images_from_listing,
    extract_price,
    extract_sku_from_dom,
    extract_sku_from_listing,
    extract_sku_from_url,
    extract_title,
    is_available_in_detail,
    is_available_in_listing,
)
from app.scraping.types import ScrapedProduct

logger = logging.getLogger(__name__)

SYNTHETIC_ID_ATTRIBUTES: tuple[str, ...] = ("data-product-id", "data-item-id", "data-sku", "data-testid")
PLACEHOLDER_IDS = {"ssr-pod", "pod", "product", "item"}
_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")

SYNTHETIC_PREFIXES = {
    "FALABELLA": "FAL",
    "PARIS": "PAR",
    "MERCADO_LIBRE": "MLA",
}


def extract_products(
    items: Iterable[Tag],
    strategy: MarketplaceStrategy,
    *,
    seen_skus: MutableSet[str] | None = None,
    page_url: str | None = None,
    synthetic_sku_mode: str = "random",
) -> list[ScrapedProduct]:
    """
    Valid products in item order.

    Items without a sku or a name are dropped. When `seen_skus` is given,
    items whose sku is already in it are dropped and accepted skus are added,
    so one set can deduplicate across several pages of the same source.
    """

    products: list[ScrapedProduct] = []
    total = 0
    for item in items:
        total += 1
        try:
            product = extract_product_from_listing(
                item,
                strategy,
                page_url=page_url,
                synthetic_sku_mode=synthetic_sku_mode,
            )
        except ProductValidationError as exc:
            logger.debug("Discarding listing item: %s", exc)
            continue
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "listing_item_failed",
                source=strategy.source.value,
                error=str(exc),
            )
            continue

        if seen_skus is not None:
            if product.sku in seen_skus:
                logger.debug("Skipping already seen sku=%s", product.sku)
                continue
            seen_skus.add(product.sku)
        products.append(product)

    log_event(
        logger,
        logging.INFO,
        "listing_products_extracted",
        source=strategy.source.value,
        items=total,
        products=len(products),
    )
    return products


def extract_product_from_listing(
    item: Tag,
    strategy: MarketplaceStrategy,
    *,
    page_url: str | None = None,
    synthetic_sku_mode: str = "random",
) -> ScrapedProduct:
    """
    Build one product from a listing node.

    Raises ProductValidationError when no sku or no name can be found.
    """

    selectors = strategy.listing
    name = extract_title(item, selectors.name, *selectors.name_fallbacks)

    sku = extract_sku_from_listing(
        item,
        attributes=selectors.sku_attributes,
        url_patterns=strategy.sku_url_patterns,
    )
    if not sku and strategy.requires_synthetic_sku:
        sku = _sku_from_data_attributes(item)
        if not sku:
            sku = synthesize_sku(name, source=strategy.source.value, mode=synthetic_sku_mode)
            logger.debug("Synthetic sku generated for source=%s: %s", strategy.source.value, sku)
    if not sku:
        raise ProductValidationError("listing item has no sku")
    if not name:
        raise ProductValidationError(f"listing item sku={sku} has no name")

    return ScrapedProduct(
        sku=sku,
        name=name,
        source=strategy.source,
        current_price=extract_price(item, selectors.current_price),
        previous_price=extract_price(item, selectors.previous_price),
        images=tuple(extract_images_from_listing(item, selectors.images)),
        available=is_available_in_listing(item),
        source_url=_listing_source_url(item, strategy, page_url),
    )


def extract_product_from_detail(
    doc: BeautifulSoup | Tag,
    url: str,
    strategy: MarketplaceStrategy,
) -> ScrapedProduct | None:
    """
    Build one product from a detail page, or None without sku or name.
    """

    selectors = strategy.detail
    sku = extract_sku_from_url(url, url_patterns=strategy.sku_url_patterns) or extract_sku_from_dom(doc)
    if not sku:
        log_event(logger, logging.ERROR, "detail_sku_missing", url=url, source=strategy.source.value)
        return None

    name = extract_title(doc, selectors.name, *selectors.name_fallbacks)
    if not name:
        log_event(logger, logging.ERROR, "detail_name_missing", url=url, sku=sku)
        return None

    return ScrapedProduct(
        sku=sku,
        name=name,
        source=strategy.source,
        current_price=extract_price(doc, selectors.current_price),
        previous_price=extract_price(doc, selectors.previous_price),
        images=tuple(extract_images_from_detail(doc, selectors.images)),
        available=is_available_in_detail(doc, selectors.buy_button),
        source_url=url,
    )


def synthesize_sku(name: str | None, *, source: str = "FALABELLA", mode: str = "random") -> str | None:
    """
    Identifier for a listing item that exposes none.

    "hash" mode is stable for a given name. "random" mode mixes in the clock
    and randomness, so re-scraping the same item yields a new identifier.
    """

    prefix = SYNTHETIC_PREFIXES.get(source, source[:3].upper())
    if mode == "hash":
        if not name:
            return None
        digest = hashlib.sha1(clean_text(name).lower().encode("utf-8")).hexdigest()
        return f"{prefix}-{digest[:12]}"

    now_ms = time.time_ns() // 1_000_000
    name_hash = zlib.crc32(name.encode("utf-8")) if name else now_ms % 10000
    stamp = str(now_ms)[-6:]
    salt = random.randint(0, 9999)
    return f"{prefix}-{name_hash}-{stamp}-{salt}-{uuid.uuid4().hex[:3]}"


def is_valid_source_id(value: str | None) -> bool:
    if not value:
        return False
    candidate = value.strip()
    if len(candidate) < 3:
        return False
    if candidate.lower() in PLACEHOLDER_IDS or candidate.lower().startswith("test-"):
        return False
    return bool(_ALPHANUMERIC.search(candidate))


def _sku_from_data_attributes(item: Tag) -> str | None:
    for name in SYNTHETIC_ID_ATTRIBUTES:
        value = attr(item, name)
        if is_valid_source_id(value):
            return value
    return None


def _listing_source_url(item: Tag, strategy: MarketplaceStrategy, page_url: str | None) -> str | None:
    link = first_link(item)
    href = attr(link, "href") if link is not None else ""
    if href:
        return absolutize_url(href, strategy.base_url)
    if strategy.listing_url_fallback and page_url:
        logger.debug("No link in listing item, using listing page url for source=%s", strategy.source.value)
        return page_url
    return None


def absolutize_url(href: str, base_url: str) -> str:
    if href.startswith(("http://", "https://")):
        return href
    if href.startswith("//"):
        return f"https:{href}"
    return urljoin(f"{base_url.rstrip('/')}/", href)
