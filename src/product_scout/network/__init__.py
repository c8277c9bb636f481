"""
Network module for Product Scout.

Plain HTTP client helpers and proxy pool loading.
"""

from product_scout.network.http import create_client, maybe_decompress
from product_scout.network.proxies import fetch_proxies, parse_proxy_payload

__all__ = [
    "create_client",
    "maybe_decompress",
    "fetch_proxies",
    "parse_proxy_payload",
]
