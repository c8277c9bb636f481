"""
Core module for Product Scout.

Contains the exception hierarchy and fetch failure classes used
throughout the application.
"""

from product_scout.core.exceptions import (
    ProductScoutError,
    ConfigurationError,
    BrowserError,
    NavigationError,
    CrawlerError,
    DomainMismatch,
    DiscoveryError,
    SitemapError,
    ProxySourceUnavailable,
    ParseError,
    FetchErrorKind,
    is_retryable,
    should_rotate,
    get_retry_delay,
)

__all__ = [
    # Base
    "ProductScoutError",
    "ConfigurationError",
    # Browser
    "BrowserError",
    "NavigationError",
    "FetchErrorKind",
    # Crawler
    "CrawlerError",
    "DomainMismatch",
    # Discovery
    "DiscoveryError",
    "SitemapError",
    "ProxySourceUnavailable",
    "ParseError",
    # Helpers
    "is_retryable",
    "should_rotate",
    "get_retry_delay",
]
