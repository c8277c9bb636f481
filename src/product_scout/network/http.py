"""
Plain HTTP helpers for robots.txt, sitemaps and the proxy source.
"""

import gzip

import httpx

GZIP_MAGIC = b"\x1f\x8b"


def create_client(
    user_agent: str | None = None,
    timeout_seconds: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create an async HTTP client with the crawler's defaults.

    Args:
        user_agent: User-Agent header to send
        timeout_seconds: Request timeout
        transport: Custom transport (tests pass httpx.MockTransport)

    Returns:
        Configured AsyncClient; the caller closes it
    """
    headers = {"User-Agent": user_agent} if user_agent else {}
    return httpx.AsyncClient(
        headers=headers,
        timeout=timeout_seconds,
        follow_redirects=True,
        transport=transport,
    )


def maybe_decompress(data: bytes) -> bytes:
    """
    Gunzip a body that is still gzip-compressed.

    httpx already undoes ``Content-Encoding: gzip``; this handles
    ``.xml.gz`` files served as opaque bytes, detected by magic number.

    Raises:
        OSError: If the data claims to be gzip but is corrupt
    """
    if data[:2] == GZIP_MAGIC:
        return gzip.decompress(data)
    return data
