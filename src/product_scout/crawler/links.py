"""
Link classification for storefront crawling.

Pure functions deciding whether a link is worth visiting, whether it
looks like a product page, and how to turn an href into an absolute
URL on the crawl's own domain.
"""

from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

from product_scout.core.exceptions import DomainMismatch, ParseError
from product_scout.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCT_MARKERS: tuple[str, ...] = (
    "/products/",
    "/p/",
    "/product-detail",
    "/productpage",
    "/item/",
    "/t/",
    "/buy",
    "/product/",
)

IMAGE_MARKERS: tuple[str, ...] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".webp",
    "/cdn/",
    "cdn.",
    "assets.",
    "/image/",
    "asset.",
    "image.",
    "/static",
)

NON_CATALOG_MARKERS: tuple[str, ...] = (
    "/account",
    "/login",
    "/contact-us",
    "/contactus",
    "/cart",
    "/search",
    "/faq",
    "/faqs",
    "/about-us",
    "/terms-of-use",
    "/t-cs",
    "/tac",
    "/privacy-policy",
    "/privacypolicy",
    "/returns-exchange-policy",
    "/news",
    "/wishlist",
)

IGNORED_SCHEMES: tuple[str, ...] = ("javascript", "mailto", "tel", "data", "sms")


def is_image(url: str) -> bool:
    """Check whether a URL points at an image or static asset."""
    return any(marker in url for marker in IMAGE_MARKERS)


def is_product(url: str) -> bool:
    """
    Check whether a URL looks like a product page.

    Example:
        >>> is_product("https://a.com/products/123")
        True
        >>> is_product("https://a.com/about-us")
        False
    """
    return any(marker in url for marker in PRODUCT_MARKERS)


def is_useful(url: str) -> bool:
    """
    Check whether a link is worth following.

    Rejects pure in-page fragments (``#MainContent``), images and
    static assets, and account/cart/legal style pages.
    """
    if "#" in url and "/" not in url:
        return False

    if is_image(url):
        return False

    return not any(marker in url for marker in NON_CATALOG_MARKERS)


def extract_domain(url: str) -> str:
    """
    Extract the host of a URL.

    Returns:
        Lowercased host (with port if present), or "" if the URL has none
    """
    try:
        return urlparse(url).netloc.lower()
    except ValueError:
        logger.debug(f"Could not parse URL: {url}")
        return ""


def _base_parts(base: str) -> tuple[str, str]:
    """Split a base (bare host or URL) into (scheme, netloc)."""
    parsed = urlparse(base if "://" in base else f"https://{base}")
    return parsed.scheme or "https", parsed.netloc.lower()


def resolve(base: str, href: str) -> str:
    """
    Turn an href into an absolute URL on the base's host.

    Args:
        base: Base domain (``shop.com``) or URL (``https://shop.com``)
        href: Link as written in the page

    Returns:
        Absolute URL; ``https`` is used when the href carries no scheme

    Raises:
        DomainMismatch: If the href names a different host

    Example:
        >>> resolve("https://a.com", "/products/5")
        'https://a.com/products/5'
    """
    scheme, netloc = _base_parts(base)
    href = href.strip()
    parsed = urlparse(href)

    if parsed.netloc:
        if parsed.netloc.lower() != netloc:
            raise DomainMismatch(href, netloc)
        if not parsed.scheme:
            return urlunparse(parsed._replace(scheme="https"))
        return href

    return urljoin(f"{scheme}://{netloc}/", href)


def normalize_url(url: str) -> str:
    """
    Normalize URL for visited-set comparison.

    - Lowercases scheme and host
    - Removes default ports
    - Removes trailing slashes (except root)
    - Removes fragments

    Args:
        url: URL to normalize

    Returns:
        Normalized URL string
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()

    if netloc.endswith(":80") and scheme == "http":
        netloc = netloc[:-3]
    elif netloc.endswith(":443") and scheme == "https":
        netloc = netloc[:-4]

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/")

    return urlunparse((scheme, netloc, path, parsed.params, parsed.query, ""))


def parse_hrefs(html: str) -> list[str]:
    """
    Collect raw href values of all anchors in an HTML document.

    Raises:
        ParseError: If the document cannot be parsed
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:
        raise ParseError(f"Failed to parse HTML: {e}") from e

    hrefs = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href")
        if isinstance(href, str) and href.strip():
            hrefs.append(href.strip())
    return hrefs


def extract_links(html: str, base: str) -> list[str]:
    """
    Extract useful same-site links from rendered HTML.

    Links are filtered with is_useful(), resolved against the base,
    normalized and de-duplicated in document order. Cross-domain
    links are dropped silently.

    Args:
        html: Rendered page HTML
        base: Crawl base domain or root URL

    Returns:
        Normalized absolute URLs; empty for unparseable HTML
    """
    if not html:
        return []

    try:
        hrefs = parse_hrefs(html)
    except ParseError as e:
        logger.warning(f"Treating page as linkless: {e}")
        return []

    links: list[str] = []
    seen: set[str] = set()

    for href in hrefs:
        scheme = urlparse(href).scheme.lower()
        if scheme in IGNORED_SCHEMES:
            continue

        if not is_useful(href):
            continue

        try:
            absolute = resolve(base, href)
        except DomainMismatch:
            continue
        except ValueError:
            logger.debug(f"Skipping malformed href: {href}")
            continue

        normalized = normalize_url(absolute)
        if normalized not in seen:
            seen.add(normalized)
            links.append(normalized)

    return links
