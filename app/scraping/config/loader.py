"""
Environment + JSON config loader for marketplace crawling.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from db.config import load_env_files

from app.domain.marketplace import MarketplaceSource
from app.scraping.config.models import (
    CategorySelectors,
    CrawlerSettings,
    DetailSelectors,
    ListingSelectors,
    MarketplaceStrategy,
)

DEFAULT_CONFIG_PATH = "app/scraping/config/marketplaces.json"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
SYNTHETIC_SKU_MODES = {"random", "hash"}


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


@lru_cache(maxsize=1)
def get_crawler_settings() -> CrawlerSettings:
    """
    Return cached crawler settings from environment variables.
    """

    load_env_files()
    config_path = _get_str_env("CRAWLER_CONFIG_PATH", DEFAULT_CONFIG_PATH)
    synthetic_mode = _get_str_env("CRAWLER_SYNTHETIC_SKU_MODE", "random").lower()
    if synthetic_mode not in SYNTHETIC_SKU_MODES:
        synthetic_mode = "random"

    return CrawlerSettings(
        config_path=str(_resolve_config_path(config_path)),
        user_agent=_get_str_env("CRAWLER_USER_AGENT", DEFAULT_USER_AGENT),
        timeout_seconds=max(1.0, _get_float_env("CRAWLER_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("CRAWLER_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(
            0.1,
            _get_float_env("CRAWLER_BACKOFF_INITIAL_SECONDS", 0.5),
        ),
        backoff_multiplier=max(1.0, _get_float_env("CRAWLER_BACKOFF_MULTIPLIER", 2.0)),
        page_load_timeout_seconds=max(
            1.0,
            _get_float_env("CRAWLER_PAGE_LOAD_TIMEOUT_SECONDS", 30.0),
        ),
        initial_settle_seconds=max(0.0, _get_float_env("CRAWLER_INITIAL_SETTLE_SECONDS", 3.0)),
        scroll_settle_seconds=max(0.0, _get_float_env("CRAWLER_SCROLL_SETTLE_SECONDS", 1.5)),
        max_scrolls=max(1, _get_int_env("CRAWLER_MAX_SCROLLS", 50)),
        stable_scrolls=max(1, _get_int_env("CRAWLER_STABLE_SCROLLS", 3)),
        headless=_get_bool_env("CRAWLER_HEADLESS", True),
        synthetic_sku_mode=synthetic_mode,
        storage_batch_size=max(1, _get_int_env("CRAWLER_STORAGE_BATCH_SIZE", 500)),
        renderer_enabled=_get_bool_env("CRAWLER_RENDERER_ENABLED", True),
    )


def load_marketplace_strategies(*, config_path: str | None = None) -> list[MarketplaceStrategy]:
    """
    Load per-source strategies from a JSON file, preserving file order.
    """

    path = _resolve_config_path(config_path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        raise FileNotFoundError(f"Marketplace config file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    return parse_marketplace_strategies(raw_data)


def parse_marketplace_strategies(raw_data: object) -> list[MarketplaceStrategy]:
    if not isinstance(raw_data, dict):
        raise ValueError("Invalid marketplace config: top level must be an object.")
    marketplaces = raw_data.get("marketplaces", [])
    if not isinstance(marketplaces, list):
        raise ValueError("Invalid marketplace config: 'marketplaces' must be a list.")

    parsed: list[MarketplaceStrategy] = []
    seen: set[MarketplaceSource] = set()
    for entry in marketplaces:
        if not isinstance(entry, dict):
            continue

        source = MarketplaceSource.parse(str(entry.get("source", "")))
        if source in seen:
            raise ValueError(f"Duplicate marketplace config for source={source.value}.")
        seen.add(source)

        url_patterns = tuple(
            pattern.lower() for pattern in _normalize_list(entry.get("url_patterns", []))
        )
        base_url = str(entry.get("base_url", "")).strip().rstrip("/")
        if not url_patterns or not base_url:
            raise ValueError(
                f"Marketplace config for source={source.value} needs url_patterns and base_url."
            )

        selectors = entry.get("selectors", {})
        if not isinstance(selectors, dict):
            selectors = {}
        listing = _section(selectors, "listing")
        detail = _section(selectors, "detail")
        category = _section(selectors, "category")

        parsed.append(
            MarketplaceStrategy(
                source=source,
                url_patterns=url_patterns,
                base_url=base_url,
                listing=ListingSelectors(
                    items=_selector(listing.get("items")),
                    name=_selector(listing.get("name")),
                    name_fallbacks=_normalize_list(listing.get("name_fallbacks", [])),
                    current_price=_selector(listing.get("current_price")),
                    previous_price=_selector(listing.get("previous_price")),
                    images=_selector(listing.get("images")) or "img",
                    sku_attributes=_normalize_list(listing.get("sku_attributes", ["data-sku"])),
                ),
                detail=DetailSelectors(
                    name=_selector(detail.get("name")) or "h1",
                    name_fallbacks=_normalize_list(detail.get("name_fallbacks", [])),
                    current_price=_selector(detail.get("current_price")),
                    previous_price=_selector(detail.get("previous_price")),
                    images=_selector(detail.get("images")),
                    buy_button=_selector(detail.get("buy_button")),
                ),
                category=CategorySelectors(
                    title=_selector(category.get("title")) or "h1",
                    pagination=_selector(category.get("pagination")),
                    total_products=_selector(category.get("total_products")),
                ),
                sku_url_patterns=_normalize_list(entry.get("sku_url_patterns", [])),
                products_per_page=max(1, _optional_int(entry.get("products_per_page"), 48)),
                uses_infinite_scroll=_optional_bool(entry.get("uses_infinite_scroll"), False),
                requires_synthetic_sku=_optional_bool(entry.get("requires_synthetic_sku"), False),
                detail_fetch_blocked=_optional_bool(entry.get("detail_fetch_blocked"), False),
                listing_url_fallback=_optional_bool(entry.get("listing_url_fallback"), False),
                headers=_normalize_headers(entry.get("headers", {})),
            )
        )

    return parsed


def _section(selectors: dict, key: str) -> dict:
    value = selectors.get(key, {})
    return value if isinstance(value, dict) else {}


def _selector(value: object) -> str:
    """
    Accept a selector string or a list of selectors; lists become one
    comma-separated chain.
    """

    return ", ".join(_normalize_list(value))


def _normalize_list(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value.strip(),) if value.strip() else ()
    if isinstance(value, list):
        return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    return ()


def _normalize_headers(headers: object) -> dict[str, str]:
    if not isinstance(headers, dict):
        return {}

    normalized: dict[str, str] = {}
    for key, value in headers.items():
        if not isinstance(key, str) or not isinstance(value, str):
            continue
        if key.strip() and value.strip():
            normalized[key.strip()] = value.strip()
    return normalized


def _optional_int(value: object, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
