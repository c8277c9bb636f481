"""
Dynamic crawl job for one storefront.

A CrawlJob owns everything a crawl of one seed URL needs: frontier,
visited set, result set, termination coordinator and page fetcher.
Its workers drain the frontier, fetch rendered pages, classify the
links they find and feed new URLs back, until the coordinator
declares the job finished.
"""

import asyncio
import random
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from product_scout.browser.fetcher import PageFetcher
from product_scout.browser.session import RenderEngine
from product_scout.config.settings import CrawlerSettings, FetchSettings
from product_scout.crawler.coordinator import TerminationCoordinator, TerminationReason
from product_scout.crawler.frontier import Frontier
from product_scout.crawler.links import (
    extract_domain,
    extract_links,
    is_product,
    normalize_url,
)
from product_scout.crawler.state import ResultSet, VisitedSet
from product_scout.utils.logging import get_logger_with_context


@dataclass
class CrawlOutcome:
    """
    Result of a finished crawl job.

    Handed to the output writer; ``product_urls`` has no particular order.
    """

    seed_url: str
    domain: str
    product_urls: set[str] = field(default_factory=set)
    reason: TerminationReason | None = None
    pages_fetched: int = 0
    pages_abandoned: int = 0
    duration_seconds: float = 0.0


class CrawlJob:
    """
    Bounded-concurrency crawl of a single storefront.

    Example:
        >>> job = CrawlJob("https://shop.test/", engine, CrawlerSettings(links_limit=50))
        >>> outcome = await job.run()
        >>> print(len(outcome.product_urls))
    """

    def __init__(
        self,
        root_url: str,
        engine: RenderEngine,
        crawler_settings: CrawlerSettings | None = None,
        fetch_settings: FetchSettings | None = None,
        proxies: Sequence[str] = (),
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize crawl job.

        Args:
            root_url: Seed URL; ``https://`` is assumed when no scheme is given
            engine: Render engine used for every fetch
            crawler_settings: Worker count, product limit and frontier capacity
            fetch_settings: Retry, pacing and scroll configuration
            proxies: Proxy pool, read-only for the job's lifetime
            rng: Random source for pacing and proxy choice
        """
        settings = crawler_settings or CrawlerSettings()

        if "://" not in root_url:
            root_url = f"https://{root_url}"

        self.root_url = normalize_url(root_url)
        self.base_domain = extract_domain(self.root_url)
        self.base_url = f"{self.root_url.split('://', 1)[0]}://{self.base_domain}"
        self.links_limit = settings.links_limit
        self.workers = settings.workers
        self.proxies = tuple(proxies)

        self.frontier = Frontier(capacity=settings.frontier_capacity)
        self.visited = VisitedSet()
        self.results = ResultSet(limit=settings.links_limit)
        self.coordinator = TerminationCoordinator(
            frontier=self.frontier,
            results=self.results,
            domain=self.base_domain,
            progress_every=settings.progress_every,
        )
        self.fetcher = PageFetcher(
            engine=engine,
            proxies=self.proxies,
            settings=fetch_settings,
            rng=rng,
        )

        self._permits = asyncio.Semaphore(self.workers)
        self._logger = get_logger_with_context(__name__, domain=self.base_domain)
        self.pages_fetched = 0
        self.pages_abandoned = 0

    async def run(self) -> CrawlOutcome:
        """
        Crawl until the product limit is reached or the frontier is exhausted.

        Blocks until the coordinator shuts the job down, then lets
        in-flight fetches finish before returning.

        Returns:
            CrawlOutcome with the collected product URLs
        """
        started = time.perf_counter()
        self._logger.info(
            f"Starting dynamic crawl of {self.root_url} "
            f"({self.workers} workers, limit {self.links_limit}, "
            f"{len(self.proxies)} proxies)"
        )

        await self.visited.mark(self.root_url)
        self.frontier.offer(self.root_url)
        self.coordinator.start()

        tasks = [
            asyncio.create_task(self._worker(i), name=f"crawl-worker-{i}:{self.base_domain}")
            for i in range(self.workers)
        ]

        try:
            reason = await self.coordinator.wait()
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await self.coordinator.stop()

        outcome = CrawlOutcome(
            seed_url=self.root_url,
            domain=self.base_domain,
            product_urls=self.results.snapshot(),
            reason=reason,
            pages_fetched=self.pages_fetched,
            pages_abandoned=self.pages_abandoned,
            duration_seconds=time.perf_counter() - started,
        )

        self._logger.info(
            f"Crawl finished: {len(outcome.product_urls)} products, "
            f"{outcome.pages_fetched} pages, {outcome.pages_abandoned} abandoned, "
            f"{outcome.duration_seconds:.1f}s"
        )
        return outcome

    async def _worker(self, worker_id: int) -> None:
        """Drain the frontier until it is closed."""
        while not self.coordinator.terminal:
            url = await self.frontier.get()
            if url is None:
                break

            try:
                async with self._permits:
                    await self._process(url)
            except Exception as e:
                self._logger.error(f"Worker {worker_id} failed on {url}: {e}")
            finally:
                self.frontier.task_done()

        self._logger.debug(f"Worker {worker_id} exiting")

    async def _process(self, url: str) -> None:
        """Fetch one URL and route the links it contains."""
        result = await self.fetcher.fetch(url)

        if not result.ok:
            self.pages_abandoned += 1
            self._logger.debug(f"Abandoned {url} after {result.attempts} attempts")
            return

        self.pages_fetched += 1
        self._logger.debug(f"Visited {url}")

        for link in extract_links(result.html, self.base_url):
            if self.coordinator.terminal:
                return

            if not await self.visited.mark(link):
                continue

            if is_product(link):
                await self.coordinator.record(link)

            if not self.coordinator.terminal:
                self.frontier.offer(link)
