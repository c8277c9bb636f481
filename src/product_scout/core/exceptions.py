"""
Custom exceptions for Product Scout.

Provides a hierarchy of exceptions for precise error handling across
all subsystems. All exceptions inherit from ProductScoutError.

Exception Hierarchy:
    ProductScoutError (base)
    ├── ConfigurationError
    ├── BrowserError
    │   └── NavigationError
    ├── CrawlerError
    │   └── DomainMismatch
    ├── DiscoveryError
    │   └── SitemapError
    ├── ProxySourceUnavailable
    └── ParseError
"""

from enum import Enum
from typing import Any


class FetchErrorKind(str, Enum):
    """
    Failure classes produced by the fetch adapter.

    TRANSIENT_ROTATE failures switch proxy and session before retrying,
    TRANSIENT_RETRY failures retry on the same session, and EXHAUSTED
    marks a URL abandoned after the last attempt.
    """

    TRANSIENT_ROTATE = "transient_rotate"
    TRANSIENT_RETRY = "transient_retry"
    EXHAUSTED = "exhausted"


class ProductScoutError(Exception):
    """
    Base exception for all Product Scout errors.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(
                f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ProductScoutError):
    """
    Error in configuration loading or validation.

    Raised when a configuration file is missing or malformed. Invalid
    values for the recognized worker/limit variables never raise; they
    fall back to defaults.
    """

    pass


# =============================================================================
# Browser Errors
# =============================================================================


class BrowserError(ProductScoutError):
    """
    Base error for render engine operations.

    Raised when the browser cannot be launched or a session cannot be
    opened.
    """

    pass


class NavigationError(BrowserError):
    """
    Error during page navigation, already classified.

    The kind decides the recovery strategy of the fetch adapter:
    rotate proxy and session, or retry in place.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        kind: FetchErrorKind = FetchErrorKind.TRANSIENT_RETRY,
        details: dict[str, Any] | None = None,
        retry_after: float | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        details["kind"] = kind.value
        super().__init__(message, details)
        self.url = url
        self.kind = kind
        self.retry_after = retry_after


# =============================================================================
# Crawler Errors
# =============================================================================


class CrawlerError(ProductScoutError):
    """Base error for crawl job operations."""

    pass


class DomainMismatch(CrawlerError):
    """
    Raised when a link points at a different host than the crawl's domain.

    Not a failure: the worker simply drops the link.
    """

    def __init__(self, href: str, base_domain: str) -> None:
        super().__init__(
            "Link host does not match crawl domain",
            {"href": href, "base_domain": base_domain},
        )
        self.href = href
        self.base_domain = base_domain


# =============================================================================
# Discovery Errors
# =============================================================================


class DiscoveryError(ProductScoutError):
    """Base error for static discovery operations."""

    pass


class SitemapError(DiscoveryError):
    """
    Error fetching or reading a sitemap.

    Raised when:
    - robots.txt is unreachable or names no sitemap
    - a sitemap document cannot be fetched or decompressed
    - the document is neither a urlset nor a sitemapindex
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)
        self.url = url


class ProxySourceUnavailable(ProductScoutError):
    """
    The proxy source could not be queried or returned garbage.

    Callers degrade to an empty proxy pool.
    """

    pass


class ParseError(ProductScoutError):
    """Malformed HTML or XML; treated as zero extracted links."""

    pass


# =============================================================================
# Utility Functions
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """
    Check if an error is a transient fetch failure.

    Args:
        error: The exception to check

    Returns:
        True if another attempt may succeed
    """
    return isinstance(error, NavigationError) and error.kind in (
        FetchErrorKind.TRANSIENT_ROTATE,
        FetchErrorKind.TRANSIENT_RETRY,
    )


def should_rotate(error: Exception) -> bool:
    """Check if an error calls for a new proxy and session."""
    return (
        isinstance(error, NavigationError)
        and error.kind is FetchErrorKind.TRANSIENT_ROTATE
    )


def get_retry_delay(error: Exception, default: float = 5.0) -> float:
    """
    Get the recommended retry delay for an error.

    Args:
        error: The exception to check
        default: Default delay if not specified by error

    Returns:
        Recommended delay in seconds before retry
    """
    if isinstance(error, NavigationError) and error.retry_after is not None:
        return error.retry_after
    return default
