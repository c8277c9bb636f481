"""
Product Scout - Product URL discovery for e-commerce storefronts.

This package finds product page URLs for a storefront, first from its
published sitemaps and otherwise by crawling it with a headless browser.
"""

__version__ = "0.1.0"

from product_scout.config import Settings, load_config
from product_scout.utils.logging import setup_logging, get_logger
from product_scout.core.exceptions import ProductScoutError
from product_scout.pipeline import DiscoveryResult, discover_products, run_batch

__all__ = [
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "ProductScoutError",
    "DiscoveryResult",
    "discover_products",
    "run_batch",
]
