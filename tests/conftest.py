"""Shared pytest fixtures.

The fake browser stands in for BrowserSession: it records how many
surfaces were opened and closed, which URLs were rendered and which
scripts ran, and replays a canned page snapshot.
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

import pytest

from src.browser.renderer import RenderResponse
from src.scrapers.toolstation_scraper import BASE_URL
from src.types import ScraperConfig, SiteName


class FakeSurface:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser

    async def render(self, url, wait_until="networkidle", timeout_ms=30000):
        self.browser.render_calls.append(url)
        if self.browser.render_error is not None:
            raise self.browser.render_error
        return self.browser.response

    async def wait_for_selector(self, selector, timeout_ms):
        self.browser.wait_calls.append(selector)
        return self.browser.ready

    async def wait_for_function(self, expression, timeout_ms):
        self.browser.wait_calls.append(expression)
        return self.browser.ready

    async def run_script(self, script, arg=None):
        self.browser.script_calls.append((script, arg))
        if self.browser.script_error is not None:
            raise self.browser.script_error
        return self.browser.snapshot


class FakeBrowser:
    def __init__(
        self,
        snapshot: Optional[dict[str, Any]] = None,
        status: Optional[int] = 200,
        ready: bool = True,
        render_error: Optional[Exception] = None,
        script_error: Optional[Exception] = None,
    ):
        self.snapshot = snapshot if snapshot is not None else {"cards": []}
        self.response = RenderResponse(status=status, url="") if status else None
        self.ready = ready
        self.render_error = render_error
        self.script_error = script_error
        self.opened = 0
        self.closed = 0
        self.render_calls: list[str] = []
        self.wait_calls: list[str] = []
        self.script_calls: list[tuple[str, Any]] = []

    @asynccontextmanager
    async def open_surface(self):
        self.opened += 1
        try:
            yield FakeSurface(self)
        finally:
            self.closed += 1


def toolstation_card(
    code: str,
    title: str = "Stanley FatMax Claw Hammer 16oz",
    price: Optional[str] = "£12.50 ex. VAT £15.00",
    reviews: int = 12,
    link: bool = True,
) -> dict[str, Any]:
    """Card snapshot shaped like a Toolstation listing tile."""
    lines = [title, f"({reviews})"]
    if price:
        lines.append(price)
    lines += [f"Product code: {code}", "Add to basket"]

    links = [{"href": "/basket/add", "text": "Add to basket"}]
    if link:
        links.insert(0, {"href": f"/stanley-claw-hammer/p{code}", "text": title})

    return {
        "text": "\n".join(lines),
        "links": links,
        "images": [
            "https://cdn.toolstation.com/icons/star.png",
            f"https://cdn.toolstation.com/images/{code}.jpg",
        ],
        "fields": {},
    }


def listing_snapshot(cards: list[dict[str, Any]], body_extra: str = "") -> dict[str, Any]:
    body = "\n".join(card.get("text", "") for card in cards)
    return {
        "url": f"{BASE_URL}/search?q=hammer&page=1",
        "bodyText": f"{body_extra}\n{body}",
        "cards": cards,
    }


@pytest.fixture
def fake_browser():
    """Factory for FakeBrowser instances."""
    return FakeBrowser


@pytest.fixture
def make_card():
    return toolstation_card


@pytest.fixture
def make_listing():
    return listing_snapshot


@pytest.fixture
def toolstation_config() -> ScraperConfig:
    """Toolstation settings with no settle delay."""
    return ScraperConfig(
        site=SiteName("toolstation"),
        base_url=BASE_URL,
        settle_delay=0,
        asset_host="toolstation",
    )
