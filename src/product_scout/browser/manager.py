"""
Browser lifecycle management using Playwright.

One PlaywrightEngine owns one browser process per crawl job. Every
render session is a separate browser context, so each proxy gets its
own cookies, cache and egress.
"""

from typing import Any

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from product_scout.browser.session import classify_navigation_error
from product_scout.config.settings import BrowserSettings
from product_scout.core.exceptions import BrowserError
from product_scout.utils.logging import get_logger

logger = get_logger(__name__)


class PlaywrightSession:
    """
    Render session backed by a Playwright browser context and page.

    Navigation errors are classified here, at the engine boundary, so
    the fetch adapter only ever sees NavigationError.
    """

    def __init__(
        self,
        context: BrowserContext,
        page: Page,
        proxy: str | None = None,
    ) -> None:
        self.context = context
        self.page = page
        self.proxy = proxy
        self._closed = False

    async def navigate(self, url: str) -> None:
        """
        Navigate to URL and wait until the body is attached.

        Raises:
            NavigationError: Classified navigation failure
        """
        try:
            response = await self.page.goto(url, wait_until="domcontentloaded")
            await self.page.wait_for_selector("body", state="attached")
        except Exception as e:
            raise classify_navigation_error(e, url) from e

        if response is not None and response.status >= 400:
            logger.debug(f"HTTP {response.status} for {url}, keeping rendered page")

    async def evaluate(self, script: str) -> Any:
        """Evaluate JavaScript in the page."""
        return await self.page.evaluate(script)

    async def content(self) -> str:
        """Get the full rendered HTML."""
        return await self.page.content()

    async def close(self) -> None:
        """Close the browser context. Safe to call multiple times."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.context.close()
        except Exception as e:
            logger.warning(f"Error closing browser context: {e}")


class PlaywrightEngine:
    """
    Manages Playwright browser lifecycle and opens proxy-bound sessions.

    Example:
        >>> async with PlaywrightEngine(settings) as engine:
        ...     session = await engine.open_session("http://10.0.0.1:3128")
        ...     await session.navigate("https://example.com")
        ...     html = await session.content()
        ...     await session.close()
    """

    def __init__(self, settings: BrowserSettings) -> None:
        """
        Initialize engine with configuration.

        Args:
            settings: Browser configuration from app settings
        """
        self.settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def start(self) -> None:
        """
        Start Playwright and launch browser.

        Raises:
            BrowserError: If browser fails to launch
        """
        if self._browser is not None:
            logger.warning("Browser already started, skipping launch")
            return

        try:
            logger.info(
                f"Starting {self.settings.browser_type} browser "
                f"(headless={self.settings.headless})"
            )

            self._playwright = await async_playwright().start()
            browser_type = getattr(self._playwright, self.settings.browser_type)
            self._browser = await browser_type.launch(
                headless=self.settings.headless,
            )

        except Exception as e:
            await self._cleanup()
            raise BrowserError(
                f"Failed to launch browser: {e}",
                details={"browser_type": self.settings.browser_type},
            ) from e

    async def stop(self) -> None:
        """Stop browser and Playwright. Safe to call multiple times."""
        await self._cleanup()
        logger.debug("Browser stopped")

    async def _cleanup(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self._playwright = None

    async def open_session(self, proxy: str | None = None) -> PlaywrightSession:
        """
        Open a new browser context bound to a proxy.

        Args:
            proxy: Proxy server (``http://host:port`` or ``host:port``),
                   or None for a direct connection

        Returns:
            Session owning a fresh context and page

        Raises:
            BrowserError: If browser not started or context creation fails
        """
        if self._browser is None:
            raise BrowserError("Browser not started. Call start() first.")

        context_options: dict = {
            "viewport": {
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
            "ignore_https_errors": self.settings.ignore_https_errors,
        }
        if self.settings.user_agent:
            context_options["user_agent"] = self.settings.user_agent
        if proxy:
            context_options["proxy"] = {"server": proxy}

        context: BrowserContext | None = None
        try:
            context = await self._browser.new_context(**context_options)
            context.set_default_navigation_timeout(
                self.settings.navigation_timeout_ms)
            page = await context.new_page()
        except Exception as e:
            if context is not None:
                await context.close()
            raise BrowserError(
                f"Failed to open browser session: {e}",
                details={"proxy": proxy},
            ) from e

        logger.debug(f"Opened browser session (proxy={proxy or 'none'})")
        return PlaywrightSession(context, page, proxy)

    @property
    def is_running(self) -> bool:
        """Check if browser is currently running."""
        return self._browser is not None and self._browser.is_connected()

    async def __aenter__(self) -> "PlaywrightEngine":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
