"""
Headless-browser rendering for infinitely scrolling listing pages.

One long-lived browser session is shared by every caller. It is created
lazily on first use and torn down by `close()`; the next `render()` after a
close starts a fresh one. All browser calls run on a single worker thread;
the Playwright sync API is bound to the thread that started it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from bs4 import BeautifulSoup
from playwright.sync_api import sync_playwright

from app.scraping.config.models import CrawlerSettings
from app.scraping.errors import RenderError
from app.scraping.logging_utils import log_event
from app.scraping.types import PageDocument, ScrollOutcome

logger = logging.getLogger(__name__)

SCROLL_TO_BOTTOM_SCRIPT = "window.scrollTo(0, document.body.scrollHeight);"
COUNT_ITEMS_SCRIPT = "selector => document.querySelectorAll(selector).length"


class BrowserSession(Protocol):
    """
    Minimal browser automation surface used by the renderer.
    """

    def open(self, url: str, *, timeout_seconds: float) -> None: ...

    def scroll_to_bottom(self) -> None: ...

    def count(self, selector: str) -> int: ...

    def content(self) -> str: ...

    def close(self) -> None: ...


class PlaywrightSession:
    """
    Chromium page driven through `playwright.sync_api`.
    """

    def __init__(self, *, headless: bool = True, user_agent: str | None = None) -> None:
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=headless,
                args=["--no-sandbox", "--disable-dev-shm-usage"],
            )
            self._context = self._browser.new_context(
                user_agent=user_agent,
                viewport={"width": 1920, "height": 1080},
            )
            self._page = self._context.new_page()
        except Exception:
            self._playwright.stop()
            raise

    def open(self, url: str, *, timeout_seconds: float) -> None:
        self._page.goto(url, timeout=timeout_seconds * 1000, wait_until="domcontentloaded")

    def scroll_to_bottom(self) -> None:
        self._page.evaluate(SCROLL_TO_BOTTOM_SCRIPT)

    def count(self, selector: str) -> int:
        return int(self._page.evaluate(COUNT_ITEMS_SCRIPT, selector))

    def content(self) -> str:
        return self._page.content()

    def close(self) -> None:
        try:
            self._context.close()
            self._browser.close()
        finally:
            self._playwright.stop()


def scroll_until_stable(
    scroll: Callable[[], None],
    count: Callable[[], int],
    *,
    settle: Callable[[], None],
    max_iterations: int = 50,
    stable_threshold: int = 3,
) -> ScrollOutcome:
    """
    Scroll, settle and count until the count stops changing.

    Stops once `stable_threshold` consecutive readings equal the reading
    before them, or after `max_iterations` scrolls.
    """

    previous_count = 0
    stable_reads = 0
    iterations = 0
    for iteration in range(1, max(1, max_iterations) + 1):
        iterations = iteration
        scroll()
        settle()
        current_count = count()
        logger.debug("Scroll %s/%s: %s items", iteration, max_iterations, current_count)

        if current_count == previous_count:
            stable_reads += 1
            if stable_reads >= stable_threshold:
                return ScrollOutcome(iterations=iterations, final_count=current_count, stabilized=True)
        else:
            stable_reads = 0
        previous_count = current_count

    return ScrollOutcome(iterations=iterations, final_count=previous_count, stabilized=False)


class DynamicContentRenderer:
    """
    Render a page in a shared browser session and return the scrolled markup.
    """

    def __init__(
        self,
        *,
        settings: CrawlerSettings,
        session_factory: Callable[[], BrowserSession] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory or self._default_session_factory
        self._sleep = sleep
        self._session: BrowserSession | None = None
        self._init_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="renderer")
        self._shut_down = False

    @property
    def is_initialized(self) -> bool:
        return self._session is not None

    def render(self, url: str, items_selector: str) -> PageDocument:
        try:
            future = self._executor.submit(self._render, url, items_selector)
        except RuntimeError as exc:
            raise RenderError(f"Failed to render {url}: renderer is shut down") from exc
        return future.result()

    def close(self) -> None:
        if self._shut_down:
            return
        self._executor.submit(self._close_session).result()

    def shutdown(self) -> None:
        """Close the session and stop the worker thread. The renderer cannot be reused."""
        self.close()
        self._shut_down = True
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "DynamicContentRenderer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _default_session_factory(self) -> BrowserSession:
        return PlaywrightSession(headless=self._settings.headless, user_agent=self._settings.user_agent)

    def _ensure_session(self) -> BrowserSession:
        with self._init_lock:
            if self._session is None:
                logger.info("Starting headless browser session")
                self._session = self._session_factory()
            return self._session

    def _render(self, url: str, items_selector: str) -> PageDocument:
        try:
            session = self._ensure_session()
            session.open(url, timeout_seconds=self._settings.page_load_timeout_seconds)
            self._sleep(self._settings.initial_settle_seconds)

            outcome = scroll_until_stable(
                session.scroll_to_bottom,
                lambda: session.count(items_selector),
                settle=lambda: self._sleep(self._settings.scroll_settle_seconds),
                max_iterations=self._settings.max_scrolls,
                stable_threshold=self._settings.stable_scrolls,
            )
            html = session.content()
        except Exception as exc:
            log_event(logger, logging.ERROR, "render_failed", url=url, error=str(exc))
            raise RenderError(f"Failed to render {url}: {exc}") from exc

        log_event(
            logger,
            logging.INFO,
            "page_rendered",
            url=url,
            items=outcome.final_count,
            scrolls=outcome.iterations,
            stabilized=outcome.stabilized,
        )
        return PageDocument(url=url, soup=BeautifulSoup(html, "html.parser"), html_length=len(html))

    def _close_session(self) -> None:
        with self._init_lock:
            session, self._session = self._session, None
        if session is None:
            return
        try:
            session.close()
            logger.info("Headless browser session closed")
        except Exception as exc:
            log_event(logger, logging.WARNING, "browser_close_failed", error=str(exc))
