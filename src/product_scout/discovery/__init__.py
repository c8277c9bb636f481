"""
Discovery module for Product Scout.

Static, browser-free product discovery from XML sitemaps.
"""

from product_scout.discovery.sitemap import (
    SitemapDiscovery,
    find_sitemap_directive,
    parse_sitemap,
)

__all__ = [
    "SitemapDiscovery",
    "find_sitemap_directive",
    "parse_sitemap",
]
