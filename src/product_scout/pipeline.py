"""
Batch discovery pipeline.

For each seed storefront: try sitemap discovery, fall back to a
dynamic crawl when the sitemap yields nothing, and write whatever was
found to ``<domain>.txt``. Several storefronts run concurrently under
an outer pool that is independent of each crawl's own workers.
"""

import asyncio
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import httpx

from product_scout.browser.manager import PlaywrightEngine
from product_scout.browser.session import RenderEngine
from product_scout.config.settings import BrowserSettings, Settings
from product_scout.crawler.job import CrawlJob, CrawlOutcome
from product_scout.crawler.links import extract_domain
from product_scout.discovery.sitemap import SitemapDiscovery
from product_scout.network.proxies import fetch_proxies
from product_scout.output.writer import write_product_urls
from product_scout.utils.logging import get_logger, get_logger_with_context

logger = get_logger(__name__)

EngineFactory = Callable[[BrowserSettings], AbstractAsyncContextManager[RenderEngine]]


@dataclass
class DiscoveryResult:
    """Outcome of one seed URL through the pipeline."""

    seed_url: str
    domain: str
    product_urls: set[str] = field(default_factory=set)
    source: Literal["sitemap", "crawl", "none"] = "none"
    output_path: Path | None = None
    crawl: CrawlOutcome | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True if at least one product URL was found."""
        return bool(self.product_urls)


def load_seed_urls(path: Path) -> list[str]:
    """
    Read seed URLs from a text file, one per line.

    Blank lines and lines starting with ``#`` are skipped.
    """
    seeds = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            seeds.append(line)
    return seeds


async def discover_products(
    url: str,
    settings: Settings | None = None,
    engine_factory: EngineFactory | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> DiscoveryResult:
    """
    Discover product URLs for one storefront.

    Never raises: a failure is logged and reported in the result's
    ``error`` field so other storefronts in the batch are unaffected.

    Args:
        url: Seed URL of the storefront
        settings: Application settings; defaults are used if None
        engine_factory: Builds the render engine for the dynamic crawl
                        from browser settings; Playwright if None
        http_client: Client for sitemap and proxy requests; created
                     per request if None

    Returns:
        DiscoveryResult for the seed
    """
    settings = settings or Settings()
    factory = engine_factory or PlaywrightEngine

    seed = url.strip()
    if "://" not in seed:
        seed = f"https://{seed}"

    domain = extract_domain(seed)
    result = DiscoveryResult(seed_url=url, domain=domain)
    log = get_logger_with_context(__name__, domain=domain)

    try:
        product_urls: set[str] = set()

        if settings.sitemap.enabled:
            sitemap = SitemapDiscovery(settings.sitemap, client=http_client)
            product_urls = await sitemap.discover(seed)
            if product_urls:
                result.source = "sitemap"

        if not product_urls:
            log.info("No product URLs from sitemap, starting dynamic crawl")
            proxies = await fetch_proxies(settings.proxy, client=http_client)

            async with factory(settings.browser) as engine:
                job = CrawlJob(
                    seed,
                    engine,
                    crawler_settings=settings.crawler,
                    fetch_settings=settings.fetch,
                    proxies=proxies,
                )
                result.crawl = await job.run()

            product_urls = result.crawl.product_urls
            if product_urls:
                result.source = "crawl"

        result.product_urls = product_urls

        if product_urls:
            result.output_path = write_product_urls(
                domain, sorted(product_urls), settings.output.output_dir)
        else:
            log.warning(f"No product URLs found for {domain}")

    except Exception as e:
        log.exception(f"Discovery failed for {url}: {e}")
        result.error = str(e)

    return result


async def run_batch(
    urls: Iterable[str],
    settings: Settings | None = None,
    engine_factory: EngineFactory | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[DiscoveryResult]:
    """
    Discover products for several storefronts.

    At most ``settings.batch.input_link_workers`` storefronts are
    processed at once. Duplicate seeds are processed once.

    Returns:
        One DiscoveryResult per distinct seed, in input order
    """
    settings = settings or Settings()
    seeds = list(dict.fromkeys(u.strip() for u in urls if u.strip()))
    pool = asyncio.Semaphore(settings.batch.input_link_workers)

    logger.info(
        f"Processing {len(seeds)} storefronts "
        f"({settings.batch.input_link_workers} at a time)"
    )

    async def process(seed: str) -> DiscoveryResult:
        async with pool:
            return await discover_products(
                seed, settings, engine_factory=engine_factory, http_client=http_client)

    results = await asyncio.gather(*(process(seed) for seed in seeds))

    found = sum(1 for r in results if r.ok)
    logger.info(f"Batch finished: {found}/{len(results)} storefronts yielded products")
    return list(results)
