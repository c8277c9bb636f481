"""
Configuration module for Product Scout.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from product_scout.config.settings import (
    Settings,
    BrowserSettings,
    CrawlerSettings,
    FetchSettings,
    ProxySettings,
    SitemapSettings,
    BatchSettings,
    OutputSettings,
    LoggingSettings,
)
from product_scout.config.loader import load_config

__all__ = [
    "Settings",
    "BrowserSettings",
    "CrawlerSettings",
    "FetchSettings",
    "ProxySettings",
    "SitemapSettings",
    "BatchSettings",
    "OutputSettings",
    "LoggingSettings",
    "load_config",
]
