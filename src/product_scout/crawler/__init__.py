"""
Crawler module for Product Scout.

Provides the dynamic crawl engine:
- Link classification
- Bounded frontier
- Visited and result state
- Termination coordination
- Crawl job with its worker pool
"""

from product_scout.crawler.links import (
    is_useful,
    is_image,
    is_product,
    resolve,
    normalize_url,
    extract_domain,
    extract_links,
)
from product_scout.crawler.frontier import Frontier
from product_scout.crawler.state import VisitedSet, ResultSet
from product_scout.crawler.coordinator import TerminationCoordinator, TerminationReason
from product_scout.crawler.job import CrawlJob, CrawlOutcome

__all__ = [
    # Links
    "is_useful",
    "is_image",
    "is_product",
    "resolve",
    "normalize_url",
    "extract_domain",
    "extract_links",
    # Frontier and state
    "Frontier",
    "VisitedSet",
    "ResultSet",
    # Termination
    "TerminationCoordinator",
    "TerminationReason",
    # Job
    "CrawlJob",
    "CrawlOutcome",
]
