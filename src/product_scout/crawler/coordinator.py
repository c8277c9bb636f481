"""
Termination coordination for a crawl job.

The coordinator is the only component allowed to end a crawl. Workers
report product URLs through record(); the coordinator stores them,
logs progress, and shuts the job down once the product limit is
reached or the frontier has no unfinished work left. Shutdown closes
the frontier so that idle workers wake up and exit.
"""

import asyncio
from enum import Enum

from product_scout.crawler.frontier import Frontier
from product_scout.crawler.state import ResultSet
from product_scout.utils.logging import get_logger

logger = get_logger(__name__)


class TerminationReason(str, Enum):
    """Why a crawl job ended."""

    LIMIT_REACHED = "limit_reached"
    FRONTIER_EXHAUSTED = "frontier_exhausted"


class TerminationCoordinator:
    """
    Single authority over the terminal transition of a crawl job.

    shutdown() runs its closing action exactly once no matter how many
    callers observe a terminal condition. It contains no await, so the
    check-and-set cannot interleave with another coroutine.

    Example:
        >>> coordinator = TerminationCoordinator(frontier, results, "shop.test")
        >>> coordinator.start()
        >>> # workers call await coordinator.record(url)
        >>> reason = await coordinator.wait()
    """

    def __init__(
        self,
        frontier: Frontier,
        results: ResultSet,
        domain: str,
        progress_every: int = 100,
    ) -> None:
        """
        Initialize coordinator.

        Args:
            frontier: Frontier to watch and close
            results: Result set receiving product URLs
            domain: Crawl domain, used in progress messages
            progress_every: Log a progress line every N products
        """
        self.frontier = frontier
        self.results = results
        self.domain = domain
        self.progress_every = progress_every

        self._terminal = False
        self._reason: TerminationReason | None = None
        self._shutdowns = 0
        self._done = asyncio.Event()
        self._monitor: asyncio.Task | None = None

    @property
    def terminal(self) -> bool:
        """Whether the job has reached its terminal state."""
        return self._terminal

    @property
    def reason(self) -> TerminationReason | None:
        """Reason recorded by the shutdown, if any."""
        return self._reason

    @property
    def shutdown_count(self) -> int:
        """Number of times the closing action ran (0 or 1)."""
        return self._shutdowns

    def start(self) -> None:
        """Begin watching the frontier for exhaustion."""
        if self._monitor is None:
            self._monitor = asyncio.create_task(
                self._watch_frontier(),
                name=f"frontier-monitor:{self.domain}",
            )

    async def _watch_frontier(self) -> None:
        await self.frontier.join()
        logger.info(f"Frontier exhausted for {self.domain}")
        self.shutdown(TerminationReason.FRONTIER_EXHAUSTED)

    async def record(self, url: str) -> bool:
        """
        Record a newly found product URL.

        Args:
            url: Product URL

        Returns:
            True if stored, False if the job is terminal, the URL is a
            duplicate, or the limit is already reached
        """
        if self._terminal:
            return False

        size = await self.results.add(url)
        if size is None:
            return False

        if size % self.progress_every == 0:
            logger.info(f"{size} product links fetched for {self.domain}")

        if size >= self.results.limit:
            self.shutdown(TerminationReason.LIMIT_REACHED)

        return True

    def shutdown(self, reason: TerminationReason) -> bool:
        """
        Move the job to its terminal state and close the frontier.

        Args:
            reason: Condition that triggered the shutdown

        Returns:
            True for the call that performed the shutdown, False otherwise
        """
        if self._terminal:
            return False

        self._terminal = True
        self._reason = reason
        self._shutdowns += 1

        logger.info(
            f"Stopping crawl of {self.domain} ({reason.value}, "
            f"{len(self.results)} products)"
        )
        self.frontier.close()
        self._done.set()

        if self._monitor is not None and self._monitor is not asyncio.current_task():
            self._monitor.cancel()

        return True

    async def wait(self) -> TerminationReason:
        """
        Block until the job is terminal.

        Returns:
            The termination reason
        """
        await self._done.wait()
        assert self._reason is not None
        return self._reason

    async def stop(self) -> None:
        """Cancel the frontier monitor and wait for it to finish."""
        if self._monitor is None:
            return
        if not self._monitor.done():
            self._monitor.cancel()
        try:
            await self._monitor
        except asyncio.CancelledError:
            pass
