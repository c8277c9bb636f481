"""
Rendered page fetching with retries and proxy rotation.

PageFetcher performs one rendered fetch of a URL: a jittered pause,
navigation, a settle delay, document capture and an infinite-scroll
reveal loop. Failures are retried a bounded number of times; failures
that point at the egress (proxy, tunnel, timeout, empty response,
aborted connection) move the fetch onto a new session with a
different proxy first.
"""

import asyncio
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from product_scout.browser.session import (
    RenderEngine,
    RenderSession,
    classify_navigation_error,
)
from product_scout.config.settings import FetchSettings
from product_scout.core.exceptions import (
    BrowserError,
    FetchErrorKind,
    get_retry_delay,
    is_retryable,
    should_rotate,
)
from product_scout.utils.logging import get_logger

logger = get_logger(__name__)

SCROLL_HEIGHT_JS = "document.body.scrollHeight"
SCROLL_TO_BOTTOM_JS = "window.scrollTo(0, document.body.scrollHeight)"


@dataclass
class FetchResult:
    """
    Outcome of fetching one URL.

    ``html`` is empty when the URL was abandoned.
    """

    url: str
    html: str = ""
    error: FetchErrorKind | None = None
    attempts: int = 0
    proxies: list[str | None] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether a snapshot was captured."""
        return self.error is None and bool(self.html)

    @property
    def rotations(self) -> int:
        """Number of times the session was replaced."""
        return max(0, len(self.proxies) - 1)


class PageFetcher:
    """
    Fetches rendered HTML through proxy-bound render sessions.

    Each fetch owns its sessions: one is opened at the start, replaced
    on every rotation, and the current one is always closed before
    fetch() returns.

    Example:
        >>> fetcher = PageFetcher(engine, proxies=[], settings=FetchSettings())
        >>> result = await fetcher.fetch("https://shop.test/")
        >>> if result.ok:
        ...     links = extract_links(result.html, "shop.test")
    """

    def __init__(
        self,
        engine: RenderEngine,
        proxies: Sequence[str] = (),
        settings: FetchSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize fetcher.

        Args:
            engine: Render engine opening sessions
            proxies: Read-only proxy pool; empty means direct connections
            settings: Fetch timing and retry configuration
            rng: Random source for jitter and proxy choice
        """
        self.engine = engine
        self.proxies = tuple(proxies)
        self.settings = settings or FetchSettings()
        self._rng = rng or random.Random()

    def _jitter(self) -> float:
        return self._rng.uniform(
            self.settings.min_delay_seconds,
            self.settings.max_delay_seconds,
        )

    def _pick_proxy(self, current: str | None = None) -> str | None:
        """Pick a random proxy, avoiding the current one when possible."""
        if not self.proxies:
            return None
        candidates = [p for p in self.proxies if p != current] or list(self.proxies)
        return self._rng.choice(candidates)

    async def _open_session(
        self,
        result: FetchResult,
        current: str | None = None,
    ) -> RenderSession:
        proxy = self._pick_proxy(current)
        result.proxies.append(proxy)
        logger.debug(f"Using proxy: {proxy or 'none'}")
        return await self.engine.open_session(proxy)

    async def _load(self, session: RenderSession, url: str) -> str:
        await session.navigate(url)
        if self.settings.settle_delay_seconds > 0:
            await asyncio.sleep(self.settings.settle_delay_seconds)
        return await session.content()

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch the rendered HTML of a URL.

        Args:
            url: Absolute URL to fetch

        Returns:
            FetchResult; on exhaustion ``error`` is EXHAUSTED and
            ``html`` is empty
        """
        result = FetchResult(url=url)
        session: RenderSession | None = None
        max_attempts = self.settings.max_attempts

        try:
            session = await self._open_session(result)

            for attempt in range(1, max_attempts + 1):
                result.attempts = attempt
                await asyncio.sleep(self._jitter())

                try:
                    html = await asyncio.wait_for(
                        self._load(session, url),
                        timeout=self.settings.fetch_timeout_seconds,
                    )
                except Exception as e:
                    error = classify_navigation_error(e, url)

                    if attempt == max_attempts or not is_retryable(error):
                        logger.warning(
                            f"Failed to load {url} after {attempt} attempts: {error}")
                        result.error = FetchErrorKind.EXHAUSTED
                        return result

                    if should_rotate(error):
                        logger.info(f"Rotating proxy and retrying {url}: {error.message}")
                        current = session.proxy
                        await session.close()
                        session = None
                        session = await self._open_session(result, current)
                    else:
                        logger.info(f"Retrying {url}: {error.message}")
                        await asyncio.sleep(
                            get_retry_delay(error, self.settings.retry_delay_seconds))
                    continue

                result.html = await self._reveal(session, url, html)
                return result

        except BrowserError as e:
            logger.error(f"Could not open a browser session for {url}: {e}")
            result.error = FetchErrorKind.EXHAUSTED
            result.html = ""
            return result

        finally:
            if session is not None:
                await session.close()

    async def _reveal(self, session: RenderSession, url: str, html: str) -> str:
        """Run the reveal loop and re-capture; fall back to ``html``."""
        try:
            scrolls = await asyncio.wait_for(
                self.reveal_content(session),
                timeout=self.settings.fetch_timeout_seconds,
            )
        except Exception as e:
            logger.warning(f"Failed to handle infinite scroll on {url}: {e}")
            return html

        if scrolls == 0:
            return html

        logger.debug(f"Revealed more content on {url} after {scrolls} scrolls")
        try:
            return await session.content() or html
        except Exception as e:
            logger.warning(f"Failed to re-capture {url} after scrolling: {e}")
            return html

    async def reveal_content(self, session: RenderSession) -> int:
        """
        Scroll to the bottom until the page stops growing.

        Each round measures the document height, scrolls, waits and
        measures again. Growth counts a scroll and resets the stall
        counter; no growth counts a stall.

        Returns:
            Number of scrolls that grew the page
        """
        stalls = 0
        scrolls = 0

        while stalls < self.settings.max_scroll_retries and scrolls < self.settings.max_scrolls:
            before = int(await session.evaluate(SCROLL_HEIGHT_JS) or 0)
            await session.evaluate(SCROLL_TO_BOTTOM_JS)
            if self.settings.scroll_delay_seconds > 0:
                await asyncio.sleep(self.settings.scroll_delay_seconds)
            after = int(await session.evaluate(SCROLL_HEIGHT_JS) or 0)

            if after > before:
                scrolls += 1
                stalls = 0
            else:
                stalls += 1

        return scrolls
