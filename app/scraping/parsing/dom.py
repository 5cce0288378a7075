"""
Selector and text helpers shared by the HTML extractors.
"""

from __future__ import annotations

import logging
import re

from bs4 import Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def split_selectors(selector: str | None) -> list[str]:
    """
    Split a comma-separated selector chain into trimmed, non-empty parts.
    """

    if not selector:
        return []
    return [part.strip() for part in selector.split(",") if part.strip()]


def select_first(node: Tag, selector: str) -> Tag | None:
    try:
        return node.select_one(selector)
    except SelectorSyntaxError:
        logger.debug("Skipping invalid selector %r", selector)
        return None


def select_all(node: Tag, selector: str) -> list[Tag]:
    try:
        return list(node.select(selector))
    except SelectorSyntaxError:
        logger.debug("Skipping invalid selector %r", selector)
        return []


def clean_text(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def node_text(node: Tag | None) -> str:
    if node is None:
        return ""
    return clean_text(node.get_text(" ", strip=True))


def first_link(item: Tag) -> Tag | None:
    """
    Return the item itself when it is a link, otherwise its first `a[href]`.
    """

    if item.name == "a" and item.get("href"):
        return item
    return select_first(item, "a[href]")


def attr(node: Tag, name: str) -> str:
    value = node.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value).strip()
    return str(value).strip()
