"""
Category display name of a listing page.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

from app.scraping.parsing.dom import node_text, select_first, split_selectors

logger = logging.getLogger(__name__)

LAST_BREADCRUMB_SELECTOR = ".breadcrumb li:last-child, [class*='breadcrumb'] li:last-child"
_TITLE_SUFFIXES = (
    re.compile(r" - Página \d+", re.IGNORECASE),
    re.compile(r" - \d+ resultados", re.IGNORECASE),
)


def extract_category_title(doc: BeautifulSoup | Tag, selector: str | None) -> str | None:
    """
    Primary selector, then last breadcrumb, then `h1`, then the `<title>`
    with paging suffixes removed.
    """

    for part in split_selectors(selector):
        text = node_text(select_first(doc, part))
        if text:
            return text

    text = node_text(select_first(doc, LAST_BREADCRUMB_SELECTOR))
    if text:
        logger.debug("Category title from breadcrumb: %s", text)
        return text

    text = node_text(select_first(doc, "h1"))
    if text:
        logger.debug("Category title from h1: %s", text)
        return text

    text = node_text(select_first(doc, "title"))
    for suffix in _TITLE_SUFFIXES:
        text = suffix.sub("", text)
    text = text.strip()
    if text:
        return text

    logger.warning("Category title not found with any selector")
    return None
