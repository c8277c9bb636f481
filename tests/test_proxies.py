"""
Tests for proxy pool loading.
"""

import httpx
import pytest

from product_scout.config import ProxySettings
from product_scout.core.exceptions import ProxySourceUnavailable
from product_scout.network import create_client, fetch_proxies, parse_proxy_payload

SOURCE = "https://proxies.test/list"


def client_for(handler) -> httpx.AsyncClient:
    return create_client(transport=httpx.MockTransport(handler))


class TestParseProxyPayload:
    """Tests for payload parsing."""

    def test_first_five_used(self):
        """Only the first five proxies are kept."""
        payload = {"proxies": [{"proxy": f"http://10.0.0.{i}:3128"} for i in range(8)]}

        proxies = parse_proxy_payload(payload)

        assert proxies == [f"http://10.0.0.{i}:3128" for i in range(5)]

    def test_invalid_entries_skipped(self):
        """Entries without a proxy string are ignored."""
        payload = {"proxies": [{"proxy": ""}, {"host": "x"}, "junk", {"proxy": "10.0.0.1:80"}]}

        assert parse_proxy_payload(payload) == ["10.0.0.1:80"]

    @pytest.mark.parametrize("payload", [[], {}, {"proxies": "nope"}, None])
    def test_wrong_shape_raises(self, payload):
        """Payloads of the wrong shape raise ProxySourceUnavailable."""
        with pytest.raises(ProxySourceUnavailable):
            parse_proxy_payload(payload)


class TestFetchProxies:
    """Tests for fetch_proxies()."""

    @pytest.mark.asyncio
    async def test_no_source_configured(self):
        """Without a source URL the pool is empty."""
        assert await fetch_proxies(ProxySettings()) == []

    @pytest.mark.asyncio
    async def test_fetch_success(self):
        """Proxies are read from the configured source."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == SOURCE
            return httpx.Response(200, json={"proxies": [{"proxy": "http://10.0.0.1:3128"}]})

        async with client_for(handler) as client:
            proxies = await fetch_proxies(ProxySettings(source_url=SOURCE), client=client)

        assert proxies == ["http://10.0.0.1:3128"]

    @pytest.mark.asyncio
    async def test_server_error_degrades_to_empty(self):
        """An unavailable source means no proxies, not a failure."""
        async with client_for(lambda request: httpx.Response(503)) as client:
            proxies = await fetch_proxies(ProxySettings(source_url=SOURCE), client=client)

        assert proxies == []

    @pytest.mark.asyncio
    async def test_invalid_json_degrades_to_empty(self):
        """A non-JSON body means no proxies."""
        async with client_for(lambda request: httpx.Response(200, text="<html>")) as client:
            proxies = await fetch_proxies(ProxySettings(source_url=SOURCE), client=client)

        assert proxies == []
