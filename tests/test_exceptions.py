"""
Tests for exception hierarchy and helpers.
"""

import pytest

from product_scout.core import (
    BrowserError,
    ConfigurationError,
    CrawlerError,
    DiscoveryError,
    DomainMismatch,
    FetchErrorKind,
    NavigationError,
    ParseError,
    ProductScoutError,
    ProxySourceUnavailable,
    SitemapError,
    get_retry_delay,
    is_retryable,
    should_rotate,
)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize("error_class", [
        ConfigurationError,
        BrowserError,
        CrawlerError,
        DiscoveryError,
        ProxySourceUnavailable,
        ParseError,
    ])
    def test_inherits_base(self, error_class):
        """Every error derives from ProductScoutError."""
        assert issubclass(error_class, ProductScoutError)

    def test_subclasses(self):
        """Specific errors sit under their subsystem errors."""
        assert issubclass(NavigationError, BrowserError)
        assert issubclass(DomainMismatch, CrawlerError)
        assert issubclass(SitemapError, DiscoveryError)


class TestErrorFormatting:
    """Tests for error messages and details."""

    def test_message_only(self):
        """Errors without details print their message."""
        assert str(ProductScoutError("boom")) == "boom"

    def test_message_with_details(self):
        """Details are appended to the message."""
        error = ProductScoutError("boom", {"url": "https://a.com"})

        assert str(error) == "boom (url='https://a.com')"
        assert "ProductScoutError" in repr(error)

    def test_navigation_error_details(self):
        """NavigationError records URL and kind."""
        error = NavigationError(
            "timeout", url="https://a.com", kind=FetchErrorKind.TRANSIENT_ROTATE)

        assert error.details == {"url": "https://a.com", "kind": "transient_rotate"}
        assert error.kind is FetchErrorKind.TRANSIENT_ROTATE

    def test_domain_mismatch(self):
        """DomainMismatch keeps the href and base domain."""
        error = DomainMismatch("https://b.com/x", "a.com")

        assert error.href == "https://b.com/x"
        assert error.details["base_domain"] == "a.com"

    def test_sitemap_error_url(self):
        """SitemapError records the failing URL."""
        error = SitemapError("missing", url="https://a.com/robots.txt")

        assert error.url == "https://a.com/robots.txt"
        assert "robots.txt" in str(error)


class TestHelpers:
    """Tests for classification helpers."""

    def test_is_retryable(self):
        """Transient navigation errors are retryable."""
        assert is_retryable(NavigationError("x", kind=FetchErrorKind.TRANSIENT_RETRY))
        assert is_retryable(NavigationError("x", kind=FetchErrorKind.TRANSIENT_ROTATE))
        assert not is_retryable(NavigationError("x", kind=FetchErrorKind.EXHAUSTED))
        assert not is_retryable(ValueError("x"))

    def test_should_rotate(self):
        """Only rotate-kind errors ask for a new proxy."""
        assert should_rotate(NavigationError("x", kind=FetchErrorKind.TRANSIENT_ROTATE))
        assert not should_rotate(NavigationError("x"))
        assert not should_rotate(BrowserError("x"))

    def test_get_retry_delay(self):
        """Errors may carry their own retry delay."""
        assert get_retry_delay(NavigationError("x", retry_after=2.5)) == 2.5
        assert get_retry_delay(NavigationError("x"), default=1.0) == 1.0
        assert get_retry_delay(ValueError("x")) == 5.0
