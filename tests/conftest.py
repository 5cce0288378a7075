"""
tests/conftest.py

Shared fixtures for the crawler test-suite.

Nothing here touches the network, a browser or a database: fetchers,
renderers, browser sessions and storage are in-memory fakes.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import replace

import pytest
from bs4 import BeautifulSoup

from app.domain.marketplace import CategoryRecord, CategoryStatus, MarketplaceSource
from app.scraping.config import load_marketplace_strategies
from app.scraping.config.models import CrawlerSettings, MarketplaceStrategy
from app.scraping.errors import FetchBlockedError, FetchError
from app.scraping.registry import StrategyRegistry
from app.scraping.storage.base import CrawlStorage
from app.scraping.types import PageDocument, ScrapedCategoryPage, ScrapedProduct


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeFetcher:
    """Serves canned HTML by URL; unknown URLs fail like a network error."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.calls: list[tuple[str, str]] = []

    def fetch(self, url: str, *, strategy=None, context: str = "listing") -> PageDocument:
        self.calls.append((url, context))
        if context == "detail" and strategy is not None and strategy.detail_fetch_blocked:
            raise FetchBlockedError("blocked", url=url)
        if url not in self.pages:
            raise FetchError(f"Failed to fetch {url}", url=url, status_code=503)
        return PageDocument.from_html(url=url, html=self.pages[url])

    def close(self) -> None:
        pass


class FakeRenderer:
    """Stands in for DynamicContentRenderer and records render requests."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.calls: list[tuple[str, str]] = []

    def render(self, url: str, items_selector: str) -> PageDocument:
        self.calls.append((url, items_selector))
        return PageDocument.from_html(url=url, html=self.pages[url])


class FakeBrowserSession:
    """Replays a fixed item-count sequence; the last value repeats."""

    def __init__(self, counts: Sequence[int], html: str = "<html><body></body></html>") -> None:
        self.counts = list(counts)
        self.html = html
        self.opened: list[str] = []
        self.scrolls = 0
        self.closed = False

    def open(self, url: str, *, timeout_seconds: float) -> None:
        self.opened.append(url)

    def scroll_to_bottom(self) -> None:
        self.scrolls += 1

    def count(self, selector: str) -> int:
        index = min(self.scrolls, len(self.counts)) - 1
        return self.counts[max(0, index)]

    def content(self) -> str:
        return self.html

    def close(self) -> None:
        self.closed = True


class InMemoryCrawlStorage(CrawlStorage):
    def __init__(self) -> None:
        self.categories: dict[str, CategoryRecord] = {}
        self.products: dict[tuple[str, str], tuple[ScrapedProduct, uuid.UUID | None]] = {}
        self.statuses: dict[uuid.UUID, tuple[CategoryStatus, dict]] = {}

    def find_category(self, source_url: str) -> CategoryRecord | None:
        return self.categories.get(source_url)

    def upsert_category(
        self,
        page: ScrapedCategoryPage,
        *,
        source_url: str,
        source: MarketplaceSource,
    ) -> CategoryRecord:
        existing = self.categories.get(source_url)
        record = CategoryRecord(
            id=existing.id if existing else uuid.uuid4(),
            name=page.name,
            source=source,
            source_url=source_url,
            total_pages=page.total_pages,
            status=existing.status if existing else CategoryStatus.ACTIVE,
        )
        self.categories[source_url] = record
        return record

    def existing_skus(self, category_id: uuid.UUID) -> set[str]:
        return {sku for (_, sku), (_, owner) in self.products.items() if owner == category_id}

    def save_products(self, products: Sequence[ScrapedProduct], *, category_id: uuid.UUID) -> int:
        inserted = 0
        for product in products:
            if product.dedupe_key in self.products:
                continue
            self.products[product.dedupe_key] = (product, category_id)
            inserted += 1
        return inserted

    def count_products(self, category_id: uuid.UUID) -> int:
        return len(self.existing_skus(category_id))

    def upsert_product(self, product: ScrapedProduct) -> bool:
        created = product.dedupe_key not in self.products
        owner = None if created else self.products[product.dedupe_key][1]
        self.products[product.dedupe_key] = (product, owner)
        return created

    def mark_category_complete(self, category_id: uuid.UUID, *, total_products: int) -> None:
        self._set_status(category_id, CategoryStatus.COMPLETE, {"total_products": total_products})

    def mark_category_error(self, category_id: uuid.UUID, *, error: str) -> None:
        self._set_status(category_id, CategoryStatus.ERROR, {"error": error})

    def _set_status(self, category_id: uuid.UUID, status: CategoryStatus, fields: dict) -> None:
        self.statuses[category_id] = (status, fields)
        for url, record in self.categories.items():
            if record.id == category_id:
                self.categories[url] = replace(record, status=status)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> CrawlerSettings:
    return CrawlerSettings(
        config_path="app/scraping/config/marketplaces.json",
        user_agent="test-agent/1.0",
        timeout_seconds=5.0,
        max_retries=2,
        backoff_initial_seconds=0.5,
        backoff_multiplier=2.0,
        page_load_timeout_seconds=10.0,
        initial_settle_seconds=0.0,
        scroll_settle_seconds=0.0,
        max_scrolls=50,
        stable_scrolls=3,
        headless=True,
        synthetic_sku_mode="random",
        storage_batch_size=100,
        renderer_enabled=False,
    )


@pytest.fixture(scope="session")
def strategies() -> dict[MarketplaceSource, MarketplaceStrategy]:
    return {strategy.source: strategy for strategy in load_marketplace_strategies()}


@pytest.fixture()
def registry(strategies) -> StrategyRegistry:
    return StrategyRegistry(strategies.values())


@pytest.fixture()
def mercado_libre(strategies) -> MarketplaceStrategy:
    return strategies[MarketplaceSource.MERCADO_LIBRE]


@pytest.fixture()
def paris(strategies) -> MarketplaceStrategy:
    return strategies[MarketplaceSource.PARIS]


@pytest.fixture()
def falabella(strategies) -> MarketplaceStrategy:
    return strategies[MarketplaceSource.FALABELLA]


@pytest.fixture()
def soup() -> Callable[[str], BeautifulSoup]:
    def _parse(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    return _parse


@pytest.fixture()
def make_fetcher() -> Callable[[dict[str, str]], FakeFetcher]:
    return FakeFetcher


@pytest.fixture()
def make_renderer() -> Callable[[dict[str, str]], FakeRenderer]:
    return FakeRenderer


@pytest.fixture()
def make_browser_session() -> Callable[..., FakeBrowserSession]:
    return FakeBrowserSession


@pytest.fixture()
def storage() -> InMemoryCrawlStorage:
    return InMemoryCrawlStorage()


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def ml_item(sku: str, name: str | None, price: str = "$125.999", previous: str | None = None) -> str:
    title = f'<h2 class="ui-search-item__title">{name}</h2>' if name else ""
    previous_html = (
        '<s class="andes-money-amount--previous">'
        f'<span class="andes-money-amount__fraction">{previous}</span></s>'
        if previous
        else ""
    )
    return (
        '<li class="ui-search-layout__item">'
        f'<a href="https://www.mercadolibre.com.ar/p/{sku}">{title}</a>'
        f'<span class="andes-money-amount__fraction">{price}</span>'
        f"{previous_html}"
        f'<img src="https://http2.mlstatic.com/D_{sku}.jpg">'
        "</li>"
    )


def ml_listing(items: Sequence[str], *, title: str = "Celulares", pages: str | None = None) -> str:
    pagination = f'<li class="andes-pagination__page-count">de {pages}</li>' if pages else ""
    return (
        "<html><head><title>Celulares | MercadoLibre</title></head><body>"
        f'<h1 class="ui-search-breadcrumb__title">{title}</h1>'
        f'<ol class="ui-search-layout">{"".join(items)}</ol>'
        f'<ul class="andes-pagination">{pagination}</ul>'
        "</body></html>"
    )


def ml_detail(name: str | None = "Samsung Galaxy A15", *, buy_button: bool = True) -> str:
    gallery = "".join(
        f'<figure class="ui-pdp-gallery__figure"><img data-src="https://http2.mlstatic.com/'
        f'D_NQ_NP_2X_{index}-MLA7531596248_012024-F.webp" src="data:,"></figure>'
        for index in range(3)
    )
    title = f'<h1 class="ui-pdp-title">{name}</h1>' if name else ""
    button = '<button data-testid="buy-now-button">Comprar ahora</button>' if buy_button else ""
    return (
        "<html><body>"
        f"{title}"
        '<div class="ui-pdp-price__second-line"><span class="andes-money-amount__fraction">189.990</span></div>'
        '<s class="andes-money-amount--previous"><span class="andes-money-amount__fraction">219.990</span></s>'
        f"{gallery}{button}"
        "</body></html>"
    )


def paris_listing(skus: Sequence[str]) -> str:
    cells = "".join(
        f'<div data-cnstrc-item-id="{sku}" role="gridcell">'
        f'<a href="/producto-{sku}.html"><span class="ui-line-clamp-2 ui-text-xs">Producto {sku}</span></a>'
        f'<div data-testid="paris-pod-price"><span>$9.990</span><span class="ui-line-through">$12.990</span></div>'
        "</div>"
        for sku in skus
    )
    return f'<html><body><h1 class="category-name">Zapatillas</h1><div class="grid">{cells}</div></body></html>'
