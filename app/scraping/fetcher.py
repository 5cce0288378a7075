"""
Static document fetching with retry and exponential backoff.
"""

from __future__ import annotations

import logging
import time
from typing import Literal

import requests

from app.scraping.config.models import CrawlerSettings, MarketplaceStrategy
from app.scraping.errors import FetchBlockedError, FetchError
from app.scraping.logging_utils import log_event
from app.scraping.types import PageDocument

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
TRANSIENT_ERRORS = (
    requests.Timeout,
    requests.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)
DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "es-CL,es;q=0.9,en;q=0.8",
}

FetchContext = Literal["listing", "detail"]


class DocumentFetcher:
    """
    Fetch one URL and return it as a parsed PageDocument.
    """

    def __init__(
        self,
        *,
        settings: CrawlerSettings,
        session: requests.Session | None = None,
        sleep=time.sleep,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._sleep = sleep

    def fetch(
        self,
        url: str,
        *,
        strategy: MarketplaceStrategy | None = None,
        context: FetchContext = "listing",
    ) -> PageDocument:
        if context == "detail" and strategy is not None and strategy.detail_fetch_blocked:
            raise FetchBlockedError(
                f"Detail pages of source={strategy.source.value} are not fetched",
                url=url,
            )

        headers = {**DEFAULT_HEADERS, "User-Agent": self._settings.user_agent}
        if strategy is not None:
            headers.update(strategy.headers)

        response = self._request_with_retry(url, headers=headers)
        document = PageDocument.from_html(url=response.url or url, html=response.text)
        log_event(
            logger,
            logging.INFO,
            "document_fetched",
            url=url,
            final_url=document.url,
            status_code=response.status_code,
            html_length=document.html_length,
        )
        return document

    def close(self) -> None:
        self._session.close()

    def _request_with_retry(self, url: str, *, headers: dict[str, str]) -> requests.Response:
        last_error: Exception | None = None
        last_status: int | None = None

        for attempt in range(self._settings.max_retries + 1):
            try:
                response = self._session.get(
                    url,
                    headers=headers,
                    timeout=self._settings.timeout_seconds,
                    allow_redirects=True,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable status={response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except TRANSIENT_ERRORS as exc:
                last_error = exc
            except requests.HTTPError as exc:
                last_error = exc
                last_status = exc.response.status_code if exc.response is not None else None
                if last_status not in RETRYABLE_STATUS_CODES:
                    raise FetchError(
                        f"Failed to fetch {url}: {exc}",
                        url=url,
                        status_code=last_status,
                    ) from exc
            except requests.RequestException as exc:
                # not transient, never retried
                raise FetchError(f"Failed to fetch {url}: {exc}", url=url) from exc

            if attempt >= self._settings.max_retries:
                break

            backoff_seconds = self._settings.backoff_initial_seconds * (
                self._settings.backoff_multiplier**attempt
            )
            log_event(
                logger,
                logging.WARNING,
                "fetch_retry_scheduled",
                url=url,
                attempt=attempt + 1,
                backoff_seconds=backoff_seconds,
                error=str(last_error),
            )
            self._sleep(backoff_seconds)

        raise FetchError(
            f"Failed to fetch {url} after retries: {last_error}",
            url=url,
            status_code=last_status,
        )
