"""Headless browser handle and per-operation rendering surfaces.

A single BrowserSession is created once by its owner (the API lifespan or
the CLI), passed by reference to the scrapers, and shut down explicitly.
Each scrape opens its own RenderSurface (browser context + page) which is
always closed when the operation ends, whatever the outcome.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from loguru import logger
from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from src.errors import ExtractionFailed, NavigationFailed

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]
VIEWPORT = {"width": 1920, "height": 1080}
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class RenderResponse:
    """The parts of the main-document response the scrapers look at."""

    status: int
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class RenderSurface:
    """One isolated tab used for a single navigation + extraction cycle."""

    def __init__(self, page: Page):
        self._page = page

    async def render(
        self, url: str, wait_until: str = "networkidle", timeout_ms: int = 30000
    ) -> RenderResponse | None:
        """Navigate to url.

        Returns:
            Response summary, or None when the driver reports no response

        Raises:
            NavigationFailed: On navigation timeout or network error
        """
        try:
            response = await self._page.goto(
                url, wait_until=wait_until, timeout=timeout_ms
            )
        except PlaywrightTimeout as e:
            raise NavigationFailed(f"Timed out loading {url}: {e}") from e
        except PlaywrightError as e:
            raise NavigationFailed(f"Could not load {url}: {e}") from e

        if response is None:
            return None
        return RenderResponse(status=response.status, url=response.url)

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        """Wait for selector to match. Returns False on timeout."""
        try:
            await self._page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightTimeout:
            return False

    async def wait_for_function(self, expression: str, timeout_ms: int) -> bool:
        """Wait for a JS expression to become truthy. Returns False on timeout."""
        try:
            await self._page.wait_for_function(expression, timeout=timeout_ms)
            return True
        except PlaywrightTimeout:
            return False

    async def run_script(self, script: str, arg: Any = None) -> Any:
        """Evaluate script in page context and return its serializable result.

        Raises:
            ExtractionFailed: If the script throws
        """
        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightError as e:
            raise ExtractionFailed(str(e)) from e


class BrowserSession:
    """Explicitly owned Chromium instance shared by concurrent scrapes.

    Usage:
        async with BrowserSession() as browser:
            async with browser.open_surface() as surface:
                ...
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def start(self) -> Browser:
        """Launch the browser if it is not running yet and return it."""
        async with self._lock:
            if self._browser is not None:
                return self._browser

            self._playwright = await async_playwright().start()
            browser = await self._playwright.chromium.launch(
                headless=self.headless, args=LAUNCH_ARGS
            )
            self._browser = browser
            logger.info("Browser launched")
            return browser

    async def close(self) -> None:
        """Close browser and stop the driver."""
        async with self._lock:
            if self._browser:
                await self._browser.close()
            if self._playwright:
                await self._playwright.stop()

            if self._browser or self._playwright:
                logger.info("Browser closed")

            self._browser = None
            self._playwright = None

    @asynccontextmanager
    async def open_surface(self) -> AsyncIterator[RenderSurface]:
        """Open a fresh context + page, closing it on every exit path."""
        browser = await self.start()
        context = await browser.new_context(
            viewport=VIEWPORT, user_agent=USER_AGENT
        )
        try:
            page = await context.new_page()
            yield RenderSurface(page)
        finally:
            await context.close()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
