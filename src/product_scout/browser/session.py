"""
Render session interfaces and error classification.

A render session is one isolated browser context bound to a single
proxy. The fetch adapter only talks to these protocols, which lets the
crawl engine run against Playwright in production and against a
deterministic fake in tests.
"""

import asyncio
from typing import Any, Protocol

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from product_scout.core.exceptions import FetchErrorKind, NavigationError

# Chromium network errors after which a different egress is worth trying
ROTATE_MARKERS: tuple[str, ...] = (
    "net::ERR_PROXY_CONNECTION_FAILED",
    "net::ERR_TUNNEL_CONNECTION_FAILED",
    "net::ERR_TIMED_OUT",
    "net::ERR_EMPTY_RESPONSE",
    "net::ERR_CONNECTION_ABORTED",
)


class RenderSession(Protocol):
    """A rendering engine handle bound to one proxy."""

    proxy: str | None

    async def navigate(self, url: str) -> None:
        """Load a URL and wait for basic readiness."""
        ...

    async def evaluate(self, script: str) -> Any:
        """Run a JavaScript expression in the page and return its value."""
        ...

    async def content(self) -> str:
        """Capture the full rendered document."""
        ...

    async def close(self) -> None:
        """Release the session. Must be safe to call more than once."""
        ...


class RenderEngine(Protocol):
    """Factory of render sessions."""

    async def open_session(self, proxy: str | None = None) -> RenderSession:
        """Open a new isolated session using the given proxy."""
        ...


def classify_navigation_error(error: BaseException, url: str | None = None) -> NavigationError:
    """
    Map a raw engine error to a classified NavigationError.

    Already classified errors pass through unchanged. Timeouts and the
    proxy/tunnel/empty-response/abort network errors call for a proxy
    rotation; anything else is retried in place.

    Args:
        error: Exception raised by the engine
        url: URL being fetched

    Returns:
        NavigationError carrying a FetchErrorKind
    """
    if isinstance(error, NavigationError):
        return error

    message = str(error)

    if isinstance(error, (asyncio.TimeoutError, PlaywrightTimeoutError)):
        return NavigationError(
            f"Navigation timeout: {message or 'no response'}",
            url=url,
            kind=FetchErrorKind.TRANSIENT_ROTATE,
        )

    if any(marker in message for marker in ROTATE_MARKERS):
        return NavigationError(
            f"Network error: {message}",
            url=url,
            kind=FetchErrorKind.TRANSIENT_ROTATE,
        )

    return NavigationError(
        f"Navigation failed: {message}",
        url=url,
        kind=FetchErrorKind.TRANSIENT_RETRY,
    )
