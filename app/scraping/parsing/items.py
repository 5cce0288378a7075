"""
Locates the repeated product nodes of a listing page.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from app.scraping.logging_utils import log_event
from app.scraping.parsing.dom import select_all

logger = logging.getLogger(__name__)

CONTAINER_CHILD_THRESHOLD = 10

# (selector, minimum count to adopt it); None means diagnostic only.
ALTERNATIVE_ITEM_SELECTORS: tuple[tuple[str, int | None], ...] = (
    ("[data-cnstrc-item-id]", 1),
    ("[role='gridcell']", 2),
    ("a[id^='product-']", 1),
    ("[data-sku]", None),
)
CONTAINER_CHILD_SELECTORS: tuple[str, ...] = (
    "[data-cnstrc-item-id]",
    "[data-sku]",
    "[data-testid='pod']",
)


def extract_items(doc: BeautifulSoup | Tag | None, selector: str | None) -> list[Tag]:
    """
    Product nodes in document order, possibly empty.
    """

    if doc is None or not selector or not selector.strip():
        logger.warning("Invalid item lookup: has_doc=%s selector=%r", doc is not None, selector)
        return []

    items = select_all(doc, selector)
    if not items:
        return _from_alternatives(doc, selector)

    if len(items) == 1:
        children = _container_children(items[0])
        if children:
            log_event(
                logger,
                logging.WARNING,
                "item_selector_matched_container",
                selector=selector,
                children=len(children),
            )
            return children

    logger.info("%s items found with selector %r", len(items), selector)
    return items


def count_items(doc: BeautifulSoup | Tag | None, selector: str | None) -> int:
    return len(extract_items(doc, selector))


def _from_alternatives(doc: BeautifulSoup | Tag, selector: str) -> list[Tag]:
    logger.warning("No items found with primary selector %r, probing alternatives", selector)

    probes = [
        (alternative, minimum, select_all(doc, alternative))
        for alternative, minimum in ALTERNATIVE_ITEM_SELECTORS
    ]
    log_event(
        logger,
        logging.INFO,
        "item_selector_alternatives",
        selector=selector,
        counts={alternative: len(found) for alternative, _, found in probes},
    )

    for alternative, minimum, found in probes:
        if minimum is not None and len(found) >= minimum:
            logger.info("Using alternative item selector %r (%s items)", alternative, len(found))
            return found
    return []


def _container_children(node: Tag) -> list[Tag]:
    for child_selector in CONTAINER_CHILD_SELECTORS:
        children = select_all(node, child_selector)
        if len(children) > CONTAINER_CHILD_THRESHOLD:
            return children
    return []
