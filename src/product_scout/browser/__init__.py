"""
Browser module for Product Scout.

Provides Playwright-based rendering with:
- Browser lifecycle management and proxy-bound sessions
- Navigation error classification
- Rendered page fetching with retries and proxy rotation
"""

from product_scout.browser.session import (
    RenderEngine,
    RenderSession,
    classify_navigation_error,
)
from product_scout.browser.manager import PlaywrightEngine, PlaywrightSession
from product_scout.browser.fetcher import FetchResult, PageFetcher

__all__ = [
    "RenderEngine",
    "RenderSession",
    "classify_navigation_error",
    "PlaywrightEngine",
    "PlaywrightSession",
    "FetchResult",
    "PageFetcher",
]
