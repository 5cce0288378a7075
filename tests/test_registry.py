"""
tests/test_registry.py

Pytest unit tests for the strategy registry and the marketplace config loader.
"""

from __future__ import annotations

import json

import pytest

from app.domain.marketplace import MarketplaceSource
from app.scraping.config import get_crawler_settings, load_marketplace_strategies, parse_marketplace_strategies
from app.scraping.errors import StrategyNotFoundError
from app.scraping.registry import StrategyRegistry


def _entry(source: str, pattern: str, **extra) -> dict:
    entry = {
        "source": source,
        "url_patterns": [pattern],
        "base_url": f"https://www.{pattern}/",
        "selectors": {"listing": {"items": "li", "name": ["h2", "h3"]}},
    }
    entry.update(extra)
    return entry


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestStrategyRegistry:
    @pytest.mark.parametrize(
        ("url", "source"),
        [
            ("https://listado.mercadolibre.com.ar/celulares", MarketplaceSource.MERCADO_LIBRE),
            ("https://www.paris.cl/zapatillas/", MarketplaceSource.PARIS),
            ("https://www.falabella.com/falabella-cl/category/cat70057/Notebooks", MarketplaceSource.FALABELLA),
            ("HTTPS://WWW.PARIS.CL/ZAPATILLAS", MarketplaceSource.PARIS),
        ],
    )
    def test_resolve(self, registry, url, source) -> None:
        assert registry.resolve(url).source is source

    @pytest.mark.parametrize("url", ["https://www.ripley.cl/tecno", "", "   "])
    def test_unsupported_url(self, registry, url) -> None:
        with pytest.raises(StrategyNotFoundError):
            registry.resolve(url)

    def test_not_found_is_a_value_error(self, registry) -> None:
        with pytest.raises(ValueError, match="Unsupported source"):
            registry.resolve("https://www.ripley.cl")

    def test_first_match_wins(self) -> None:
        first, second = parse_marketplace_strategies(
            {"marketplaces": [_entry("PARIS", "shop.cl"), _entry("FALABELLA", "shop.cl")]}
        )
        registry = StrategyRegistry([first, second])
        assert registry.resolve("https://www.shop.cl/x").source is MarketplaceSource.PARIS

    def test_duplicate_source_rejected(self, strategies) -> None:
        registry = StrategyRegistry([strategies[MarketplaceSource.PARIS]])
        with pytest.raises(ValueError, match="already registered"):
            registry.register(strategies[MarketplaceSource.PARIS])

    def test_sources_and_lookup(self, registry) -> None:
        assert registry.sources() == [
            MarketplaceSource.MERCADO_LIBRE,
            MarketplaceSource.PARIS,
            MarketplaceSource.FALABELLA,
        ]
        assert len(registry) == 3
        assert registry.for_source(MarketplaceSource.PARIS).uses_infinite_scroll is True
        with pytest.raises(KeyError):
            StrategyRegistry().for_source(MarketplaceSource.PARIS)

    def test_from_config(self, tmp_path) -> None:
        path = tmp_path / "marketplaces.json"
        path.write_text(json.dumps({"marketplaces": [_entry("PARIS", "paris.cl")]}), encoding="utf-8")
        registry = StrategyRegistry.from_config(config_path=str(path))
        assert registry.sources() == [MarketplaceSource.PARIS]


# ---------------------------------------------------------------------------
# Config loader
# ---------------------------------------------------------------------------


class TestMarketplaceConfig:
    def test_bundled_strategies(self, strategies) -> None:
        falabella = strategies[MarketplaceSource.FALABELLA]
        assert falabella.requires_synthetic_sku is True
        assert falabella.detail_fetch_blocked is True
        assert falabella.listing_url_fallback is True

        mercado_libre = strategies[MarketplaceSource.MERCADO_LIBRE]
        assert mercado_libre.uses_infinite_scroll is False
        assert mercado_libre.products_per_page == 48
        assert mercado_libre.listing.items == "li.ui-search-layout__item, li.ui-search-result"

        assert strategies[MarketplaceSource.PARIS].products_per_page == 30

    def test_selector_lists_become_chains(self) -> None:
        (strategy,) = parse_marketplace_strategies({"marketplaces": [_entry("paris", "Paris.CL")]})
        assert strategy.source is MarketplaceSource.PARIS
        assert strategy.listing.name == "h2, h3"
        assert strategy.url_patterns == ("paris.cl",)
        assert strategy.base_url == "https://www.Paris.CL"
        assert strategy.detail.name == "h1"
        assert strategy.category.title == "h1"
        assert strategy.listing.sku_attributes == ("data-sku",)

    def test_flags_and_headers(self) -> None:
        entry = _entry(
            "FALABELLA",
            "falabella.com",
            uses_infinite_scroll="yes",
            products_per_page="0",
            headers={"Accept-Language": "es-CL", "X-Empty": " "},
        )
        (strategy,) = parse_marketplace_strategies({"marketplaces": [entry]})
        assert strategy.uses_infinite_scroll is True
        assert strategy.products_per_page == 1
        assert strategy.headers == {"Accept-Language": "es-CL"}

    @pytest.mark.parametrize(
        "raw",
        [
            [],
            {"marketplaces": {}},
            {"marketplaces": [_entry("RIPLEY", "ripley.cl")]},
            {"marketplaces": [_entry("PARIS", "paris.cl"), _entry("PARIS", "paris.cl")]},
            {"marketplaces": [{"source": "PARIS", "url_patterns": ["paris.cl"]}]},
        ],
    )
    def test_invalid_config(self, raw) -> None:
        with pytest.raises(ValueError):
            parse_marketplace_strategies(raw)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_marketplace_strategies(config_path=str(tmp_path / "missing.json"))


class TestCrawlerSettings:
    @pytest.fixture(autouse=True)
    def _clear_cache(self):
        """Settings are cached per process; reset around every test."""
        get_crawler_settings.cache_clear()
        yield
        get_crawler_settings.cache_clear()

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("CRAWLER_MAX_RETRIES", "5")
        monkeypatch.setenv("CRAWLER_HEADLESS", "false")
        monkeypatch.setenv("CRAWLER_SYNTHETIC_SKU_MODE", "HASH")
        monkeypatch.setenv("CRAWLER_STABLE_SCROLLS", "0")

        settings = get_crawler_settings()
        assert settings.max_retries == 5
        assert settings.headless is False
        assert settings.synthetic_sku_mode == "hash"
        assert settings.stable_scrolls == 1
        assert settings.config_path.endswith("marketplaces.json")

    def test_invalid_values_fall_back(self, monkeypatch) -> None:
        monkeypatch.setenv("CRAWLER_SYNTHETIC_SKU_MODE", "uuid")
        monkeypatch.setenv("CRAWLER_TIMEOUT_SECONDS", "soon")
        settings = get_crawler_settings()
        assert settings.synthetic_sku_mode == "random"
        assert settings.timeout_seconds == 15.0
