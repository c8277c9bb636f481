"""
Pydantic settings models for Product Scout.

Defaults match a small batch run: two storefronts at a time, three
browser workers per storefront, 200 product URLs per storefront.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class BrowserSettings(BaseModel):
    """Playwright browser configuration."""

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode",
    )
    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to use",
    )
    navigation_timeout_ms: int = Field(
        default=60000,
        ge=1000,
        le=180000,
        description="Timeout for page navigation in milliseconds",
    )
    user_agent: str | None = Field(
        default=None,
        description="Custom user agent string. None uses browser default.",
    )
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)
    ignore_https_errors: bool = Field(
        default=False,
        description="Whether to ignore HTTPS certificate errors",
    )


class CrawlerSettings(BaseModel):
    """Dynamic crawl job configuration."""

    workers: int = Field(
        default=3,
        ge=1,
        le=64,
        description="Parallel browser workers per crawl job",
    )
    links_limit: int = Field(
        default=200,
        ge=1,
        description="Product URLs to collect before a crawl job stops",
    )
    frontier_capacity: int = Field(
        default=2000,
        ge=1,
        description="Maximum pending URLs in the frontier; extra links are dropped",
    )
    progress_every: int = Field(
        default=100,
        ge=1,
        description="Log a progress line every N recorded products",
    )


class FetchSettings(BaseModel):
    """Per-URL fetch, retry and content-reveal configuration."""

    max_attempts: int = Field(default=3, ge=1, le=10)
    min_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Lower bound of the jittered pause before each attempt",
    )
    max_delay_seconds: float = Field(
        default=3.0,
        ge=0.0,
        description="Upper bound of the jittered pause before each attempt",
    )
    settle_delay_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Pause after the page is ready, before capture",
    )
    retry_delay_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Pause before retrying a failure that keeps the proxy",
    )
    fetch_timeout_seconds: float = Field(
        default=90.0,
        gt=0.0,
        description="Hard upper bound on one navigate-and-capture attempt",
    )
    scroll_delay_seconds: float = Field(default=3.0, ge=0.0)
    max_scroll_retries: int = Field(
        default=2,
        ge=1,
        description="Consecutive scrolls without height growth before giving up",
    )
    max_scrolls: int = Field(
        default=5,
        ge=0,
        description="Maximum growing scrolls per page",
    )

    @model_validator(mode="after")
    def check_delay_range(self) -> "FetchSettings":
        """Keep the jitter range ordered."""
        if self.max_delay_seconds < self.min_delay_seconds:
            self.max_delay_seconds = self.min_delay_seconds
        return self


class ProxySettings(BaseModel):
    """Proxy source configuration."""

    source_url: str | None = Field(
        default=None,
        description="JSON endpoint listing proxies. None disables proxies.",
    )
    max_proxies: int = Field(default=5, ge=0, le=100)
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class SitemapSettings(BaseModel):
    """Static sitemap discovery configuration."""

    enabled: bool = Field(
        default=True,
        description="Try robots.txt sitemaps before launching a browser",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_sitemap_depth: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many sitemap index levels to follow",
    )


class BatchSettings(BaseModel):
    """Outer pool configuration for processing several storefronts."""

    input_link_workers: int = Field(
        default=2,
        ge=1,
        le=64,
        description="Storefronts processed in parallel",
    )


class OutputSettings(BaseModel):
    """Where discovered product URLs are written."""

    output_dir: Path = Field(
        default=Path("."),
        description="Directory receiving one <domain>.txt per storefront",
    )

    @field_validator("output_dir", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(v) if isinstance(v, str) else v


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    date_format: str = Field(default="%Y-%m-%d %H:%M:%S")
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(default=10, ge=1, le=100)
    backup_count: int = Field(default=3, ge=0, le=10)
    log_to_console: bool = Field(default=True)

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model containing all subsystem settings.

    Settings are loaded from YAML with environment variable overrides.
    """

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    crawler: CrawlerSettings = Field(default_factory=CrawlerSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    sitemap: SitemapSettings = Field(default_factory=SitemapSettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
