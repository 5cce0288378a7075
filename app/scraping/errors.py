"""
Scraping error taxonomy.
"""

from __future__ import annotations


class ScrapingError(Exception):
    """Base exception for marketplace scraping failures."""


class FetchError(ScrapingError):
    """Raised when a document cannot be fetched (network, timeout, HTTP status)."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FetchBlockedError(FetchError):
    """
    Raised when a fetch is refused by source policy before any request is made.

    This is an expected outcome and must not be retried.
    """


class StrategyNotFoundError(ScrapingError, ValueError):
    """Raised when no registered strategy matches a URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Unsupported source: no marketplace strategy matches '{url}'.")
        self.url = url


class RenderError(ScrapingError):
    """Raised when the browser automation session fails to render a page."""


class ProductValidationError(ScrapingError):
    """Raised when a listing item lacks a sku or a name after all fallbacks."""
