"""
Shared pytest fixtures for Product Scout tests.

Provides reusable fixtures for:
- Environment and logging isolation
- Fast fetch settings
- A deterministic fake render engine
- Sample storefront pages
"""

import asyncio
import os
import tempfile
from collections import Counter
from pathlib import Path
from typing import Generator

import pytest

from product_scout.browser.fetcher import SCROLL_HEIGHT_JS, SCROLL_TO_BOTTOM_JS
from product_scout.config import FetchSettings
from product_scout.config.loader import ENV_PREFIX, FLAT_ENV_VARS
from product_scout.core.exceptions import BrowserError
from product_scout.utils.logging import reset_logging

EMPTY_PAGE = "<html><body></body></html>"


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Remove configuration variables from the environment.

    Also resets logging so handlers bound to CliRunner streams do not
    leak into later tests.
    """
    for name in FLAT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith(f"{ENV_PREFIX}__"):
            monkeypatch.delenv(name)

    yield

    reset_logging()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fast_fetch_settings() -> FetchSettings:
    """Fetch settings with every pause disabled."""
    return FetchSettings(
        min_delay_seconds=0,
        max_delay_seconds=0,
        settle_delay_seconds=0,
        retry_delay_seconds=0,
        scroll_delay_seconds=0,
        fetch_timeout_seconds=5,
    )


def page(*hrefs: str) -> str:
    """Build an HTML page linking to the given hrefs."""
    anchors = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><body>{anchors}</body></html>"


class FakeSession:
    """In-memory render session serving pages from its engine."""

    def __init__(self, engine: "FakeEngine", proxy: str | None) -> None:
        self.engine = engine
        self.proxy = proxy
        self.closed = False
        self.close_calls = 0
        self.url: str | None = None
        self.height = 1000
        self.scrolled = 0

    async def navigate(self, url: str) -> None:
        self.engine.navigations.append((url, self.proxy))

        if url in self.engine.hang:
            await asyncio.sleep(60)

        failure = self.engine.failures.get(url, self.engine.failures.get("*"))
        if isinstance(failure, list):
            failure = failure.pop(0) if failure else None
        if failure:
            raise RuntimeError(failure)

        self.url = url
        self.scrolled = 0

    async def evaluate(self, script: str):
        self.engine.evaluations += 1

        if script == SCROLL_HEIGHT_JS:
            return self.height

        if script == SCROLL_TO_BOTTOM_JS:
            if self.scrolled < self.engine.growth.get(self.url, 0):
                self.scrolled += 1
                self.height += 500
            return None

        raise AssertionError(f"Unexpected script: {script}")

    async def content(self) -> str:
        if self.scrolled and self.url in self.engine.revealed:
            return self.engine.revealed[self.url]
        return self.engine.pages.get(self.url, EMPTY_PAGE)

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class FakeEngine:
    """
    Deterministic render engine for crawl tests.

    Attributes:
        pages: URL -> HTML served after navigation
        failures: URL (or "*") -> error message raised on every
                  navigation, or a list of messages consumed one per
                  navigation
        hang: URLs whose navigation never completes
        growth: URL -> number of scrolls that grow the page
        revealed: URL -> HTML served once the page has grown
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        failures: dict[str, str | list[str]] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.failures = failures or {}
        self.hang: set[str] = set()
        self.growth: dict[str, int] = {}
        self.revealed: dict[str, str] = {}
        self.sessions: list[FakeSession] = []
        self.navigations: list[tuple[str, str | None]] = []
        self.evaluations = 0
        self.fail_open = False
        self.started = False
        self.stopped = False

    async def open_session(self, proxy: str | None = None) -> FakeSession:
        if self.fail_open:
            raise BrowserError("Browser not started. Call start() first.")
        session = FakeSession(self, proxy)
        self.sessions.append(session)
        return session

    @property
    def fetched_urls(self) -> list[str]:
        return [url for url, _ in self.navigations]

    def fetch_counts(self) -> Counter:
        return Counter(self.fetched_urls)

    async def __aenter__(self) -> "FakeEngine":
        self.started = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stopped = True


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Provide an empty fake render engine."""
    return FakeEngine()


SHOP_PRODUCTS = [f"https://shop.test/products/p{i}" for i in range(1, 6)]
SHOP_CATEGORIES = [f"https://shop.test/collections/c{i}" for i in range(1, 6)]
SHOP_INFO_PAGES = [f"https://shop.test/pages/info{i}" for i in range(1, 6)]


@pytest.fixture
def shop_engine() -> FakeEngine:
    """
    Fake storefront with 5 products and 10 other pages within two hops.

    The root links to five collections, two products and a few links
    that must be dropped; each collection links to an info page and
    to at most one more product.
    """
    pages = {
        "https://shop.test/": page(
            "/collections/c1",
            "/collections/c2",
            "/collections/c3",
            "/collections/c4",
            "/collections/c5",
            "/products/p1",
            "https://shop.test/products/p2",
            "https://other.test/products/x",
            "/about-us",
            "/cart",
            "/images/banner.jpg",
            "#MainContent",
            "mailto:hello@shop.test",
        ),
        "https://shop.test/collections/c1": page("/products/p3", "/pages/info1", "/"),
        "https://shop.test/collections/c2": page("/products/p4", "/pages/info2", "/collections/c1"),
        "https://shop.test/collections/c3": page("/products/p5", "/pages/info3"),
        "https://shop.test/collections/c4": page("/pages/info4", "/products/p1"),
        "https://shop.test/collections/c5": page("/pages/info5", "/products/p2#reviews"),
    }
    return FakeEngine(pages=pages)
