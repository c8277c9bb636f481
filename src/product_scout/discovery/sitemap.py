"""
Static product discovery from XML sitemaps.

Reads the ``Sitemap:`` directive from robots.txt, then walks the
sitemap: a sitemap index is followed into its product-looking child
sitemaps (or into all children when none look like products), and a
urlset contributes every location that looks like a product page.
"""

import re
import zlib
import xml.etree.ElementTree as ET

import httpx

from product_scout.config.settings import SitemapSettings
from product_scout.core.exceptions import ParseError, SitemapError
from product_scout.crawler.links import extract_domain, is_product
from product_scout.network.http import create_client, maybe_decompress
from product_scout.utils.logging import get_logger

logger = get_logger(__name__)

SITEMAP_DIRECTIVE = re.compile(r"(?i)sitemap:\s*(\S+)")

URLSET = "urlset"
SITEMAP_INDEX = "sitemapindex"


def find_sitemap_directive(robots_txt: str) -> str | None:
    """Return the first sitemap URL named in a robots.txt body."""
    match = SITEMAP_DIRECTIVE.search(robots_txt)
    return match.group(1) if match else None


def parse_sitemap(data: bytes) -> tuple[str, list[str]]:
    """
    Parse a sitemap document.

    Supports ``<urlset>`` and ``<sitemapindex>``, with or without the
    sitemaps.org namespace.

    Args:
        data: Raw (already decompressed) XML bytes

    Returns:
        Tuple of document kind (``urlset`` or ``sitemapindex``) and the
        ``<loc>`` values it lists

    Raises:
        ParseError: If the XML is malformed
        SitemapError: If the root element is neither kind
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ParseError(f"Malformed sitemap XML: {e}") from e

    ns = ""
    if root.tag.startswith("{"):
        ns = root.tag.split("}")[0] + "}"

    if root.tag.endswith(URLSET):
        kind, entry = URLSET, "url"
    elif root.tag.endswith(SITEMAP_INDEX):
        kind, entry = SITEMAP_INDEX, "sitemap"
    else:
        raise SitemapError(
            "Unsupported sitemap format", details={"root": root.tag})

    locs = [
        el.text.strip()
        for el in root.findall(f".//{ns}{entry}/{ns}loc")
        if el.text and el.text.strip()
    ]
    return kind, locs


class SitemapDiscovery:
    """
    Finds product URLs through a site's published sitemaps.

    Example:
        >>> discovery = SitemapDiscovery(SitemapSettings())
        >>> urls = await discovery.discover("https://shop.example.com/")
    """

    def __init__(
        self,
        settings: SitemapSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize sitemap discovery.

        Args:
            settings: User agent, timeout and depth configuration
            client: HTTP client to use; one is created per discover()
                    call when None
        """
        self.settings = settings or SitemapSettings()
        self._client = client

    async def discover(self, root_url: str) -> set[str]:
        """
        Discover product URLs for a storefront.

        Args:
            root_url: Any URL on the storefront

        Returns:
            Product URLs found; empty if the site has no usable sitemap
        """
        if self._client is not None:
            return await self._discover(self._client, root_url)

        async with create_client(
            user_agent=self.settings.user_agent,
            timeout_seconds=self.settings.timeout_seconds,
        ) as client:
            return await self._discover(client, root_url)

    async def _discover(self, client: httpx.AsyncClient, root_url: str) -> set[str]:
        if "://" not in root_url:
            root_url = f"https://{root_url}"
        domain = extract_domain(root_url)

        try:
            sitemap_url = await self.find_sitemap_url(client, domain)
            logger.info(f"Sitemap URL for {domain}: {sitemap_url}")
            product_urls = await self._collect(client, sitemap_url, 1, set())
        except (SitemapError, ParseError) as e:
            logger.info(f"No sitemap products for {domain}: {e}")
            return set()

        logger.info(f"Found {len(product_urls)} product URLs in sitemaps of {domain}")
        return product_urls

    async def find_sitemap_url(self, client: httpx.AsyncClient, domain: str) -> str:
        """
        Read the sitemap location from robots.txt.

        Raises:
            SitemapError: If robots.txt is unreachable or has no directive
        """
        robots_url = f"https://{domain}/robots.txt"

        try:
            response = await client.get(robots_url)
        except httpx.HTTPError as e:
            raise SitemapError(
                f"Could not fetch robots.txt: {e}", url=robots_url) from e

        if response.status_code != 200:
            raise SitemapError(
                f"Could not fetch robots.txt: HTTP {response.status_code}",
                url=robots_url,
            )

        sitemap_url = find_sitemap_directive(response.text)
        if sitemap_url is None:
            raise SitemapError("No sitemap found in robots.txt", url=robots_url)

        return sitemap_url

    async def fetch_document(self, client: httpx.AsyncClient, url: str) -> bytes:
        """
        Download a sitemap, gunzipping it if needed.

        Raises:
            SitemapError: On network failure, non-200 status or bad gzip data
        """
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise SitemapError(f"Could not fetch sitemap: {e}", url=url) from e

        if response.status_code != 200:
            raise SitemapError(
                f"Could not fetch sitemap: HTTP {response.status_code}", url=url)

        try:
            return maybe_decompress(response.content)
        except (OSError, EOFError, zlib.error) as e:
            raise SitemapError(
                f"Could not decompress sitemap: {e}", url=url) from e

    async def _collect(
        self,
        client: httpx.AsyncClient,
        url: str,
        depth: int,
        seen: set[str],
    ) -> set[str]:
        """Collect product URLs below one sitemap document."""
        if url in seen:
            return set()
        seen.add(url)

        kind, locs = parse_sitemap(await self.fetch_document(client, url))

        if kind == URLSET:
            return {loc for loc in locs if is_product(loc)}

        if depth >= self.settings.max_sitemap_depth:
            logger.debug(f"Not following sitemap index beyond depth {depth}: {url}")
            return set()

        preferred = [loc for loc in locs if "product" in loc.lower()]
        found = await self._collect_children(client, preferred, depth + 1, seen)

        if not found:
            # No product-named child sitemap paid off, so try every child
            found = await self._collect_children(client, locs, depth + 1, seen)

        return found

    async def _collect_children(
        self,
        client: httpx.AsyncClient,
        locs: list[str],
        depth: int,
        seen: set[str],
    ) -> set[str]:
        found: set[str] = set()
        for loc in locs:
            try:
                found |= await self._collect(client, loc, depth, seen)
            except (SitemapError, ParseError) as e:
                logger.debug(f"Skipping child sitemap {loc}: {e}")
        return found
