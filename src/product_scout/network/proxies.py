"""
Proxy pool loading.

The proxy source is an optional JSON endpoint shaped like
``{"proxies": [{"proxy": "http://1.2.3.4:8080"}, ...]}``. Only the
first few entries are used. A missing or failing source means the
crawl runs without proxies; it never aborts the job.
"""

import httpx

from product_scout.config.settings import ProxySettings
from product_scout.core.exceptions import ProxySourceUnavailable
from product_scout.network.http import create_client
from product_scout.utils.logging import get_logger

logger = get_logger(__name__)


def parse_proxy_payload(payload: object, max_proxies: int = 5) -> list[str]:
    """
    Pull proxy endpoints out of a proxy source response.

    Args:
        payload: Decoded JSON body
        max_proxies: How many entries to keep

    Returns:
        Up to max_proxies proxy strings, in source order

    Raises:
        ProxySourceUnavailable: If the payload has the wrong shape
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("proxies"), list):
        raise ProxySourceUnavailable("Proxy source returned an unexpected payload")

    proxies: list[str] = []
    for entry in payload["proxies"]:
        if len(proxies) >= max_proxies:
            break
        if isinstance(entry, dict) and isinstance(entry.get("proxy"), str) and entry["proxy"].strip():
            proxies.append(entry["proxy"].strip())

    return proxies


async def _query_proxy_source(
    client: httpx.AsyncClient,
    url: str,
    max_proxies: int,
) -> list[str]:
    try:
        response = await client.get(url)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPError as e:
        raise ProxySourceUnavailable(
            f"Proxy source request failed: {e}", {"url": url}) from e
    except ValueError as e:
        raise ProxySourceUnavailable(
            f"Proxy source returned invalid JSON: {e}", {"url": url}) from e

    return parse_proxy_payload(payload, max_proxies)


async def fetch_proxies(
    settings: ProxySettings,
    client: httpx.AsyncClient | None = None,
) -> list[str]:
    """
    Load the proxy pool for a crawl job.

    Args:
        settings: Proxy source configuration
        client: HTTP client to use; one is created if None

    Returns:
        Proxy endpoints, or an empty list when no source is configured
        or the source is unavailable
    """
    if not settings.source_url or settings.max_proxies == 0:
        return []

    try:
        if client is None:
            async with create_client(timeout_seconds=settings.timeout_seconds) as owned:
                proxies = await _query_proxy_source(
                    owned, settings.source_url, settings.max_proxies)
        else:
            proxies = await _query_proxy_source(
                client, settings.source_url, settings.max_proxies)
    except ProxySourceUnavailable as e:
        logger.warning(f"{e}; continuing without proxies")
        return []

    logger.info(f"Fetched {len(proxies)} proxies")
    return proxies
