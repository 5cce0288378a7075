"""
Marketplace strategy registry and URL resolver.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from app.domain.marketplace import MarketplaceSource
from app.scraping.config import load_marketplace_strategies
from app.scraping.config.models import MarketplaceStrategy
from app.scraping.errors import StrategyNotFoundError

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """
    Ordered strategy lookup. The first strategy whose URL patterns match wins.
    """

    def __init__(self, strategies: Iterable[MarketplaceStrategy] | None = None) -> None:
        self._strategies: list[MarketplaceStrategy] = []
        for strategy in strategies or ():
            self.register(strategy)

    @classmethod
    def from_config(cls, *, config_path: str | None = None) -> "StrategyRegistry":
        return cls(load_marketplace_strategies(config_path=config_path))

    def register(self, strategy: MarketplaceStrategy) -> None:
        if any(existing.source == strategy.source for existing in self._strategies):
            raise ValueError(f"Strategy already registered for source='{strategy.source.value}'.")
        self._strategies.append(strategy)

    def resolve(self, url: str) -> MarketplaceStrategy:
        if url:
            for strategy in self._strategies:
                if strategy.matches_url(url):
                    logger.debug("Resolved url=%s to source=%s", url, strategy.source.value)
                    return strategy
        raise StrategyNotFoundError(url)

    def for_source(self, source: MarketplaceSource) -> MarketplaceStrategy:
        for strategy in self._strategies:
            if strategy.source == source:
                return strategy
        raise KeyError(source.value)

    def sources(self) -> list[MarketplaceSource]:
        return [strategy.source for strategy in self._strategies]

    def __len__(self) -> int:
        return len(self._strategies)
