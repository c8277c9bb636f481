"""
Bounded crawl frontier shared by all workers of a crawl job.

The frontier is a FIFO of pending URLs with a hard capacity. Producers
never block: offers beyond capacity, or after the frontier is closed,
are dropped. Consumers suspend while it is empty and are released with
None once it is closed.

Completion is tracked with an explicit unfinished-work counter rather
than by sampling the queue length: every accepted offer increments it
and every task_done() decrements it, so the frontier is drained only
when no URL is queued and no dequeued URL is still being processed.
"""

import asyncio
from collections import deque

from product_scout.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 2000


class Frontier:
    """
    Bounded FIFO of URLs awaiting a fetch.

    Example:
        >>> frontier = Frontier(capacity=2)
        >>> frontier.offer("https://shop.test/")
        True
        >>> url = await frontier.get()
        >>> # fetch, offer discovered links...
        >>> frontier.task_done()
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """
        Initialize frontier.

        Args:
            capacity: Maximum number of queued URLs
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")

        self.capacity = capacity
        self._items: deque[str] = deque()
        self._getters: deque[asyncio.Future] = deque()
        self._unfinished = 0
        self._finished = asyncio.Event()
        self._finished.set()
        self._closed = False
        self._accepted = 0
        self._dropped = 0

    def offer(self, url: str) -> bool:
        """
        Enqueue a URL without waiting.

        Args:
            url: URL to enqueue

        Returns:
            True if accepted, False if the frontier is full or closed
        """
        if self._closed or len(self._items) >= self.capacity:
            self._dropped += 1
            return False

        self._items.append(url)
        self._unfinished += 1
        self._accepted += 1
        self._finished.clear()
        self._wakeup_next()
        return True

    async def get(self) -> str | None:
        """
        Dequeue the oldest URL, waiting while the frontier is empty.

        Returns:
            Next URL, or None once the frontier has been closed
        """
        while not self._items:
            if self._closed:
                return None

            waiter = asyncio.get_running_loop().create_future()
            self._getters.append(waiter)
            try:
                await waiter
            except asyncio.CancelledError:
                waiter.cancel()
                try:
                    self._getters.remove(waiter)
                except ValueError:
                    pass
                # Pass on a wakeup this getter may have consumed
                if self._items and not self._closed:
                    self._wakeup_next()
                raise

        if self._closed:
            return None

        return self._items.popleft()

    def task_done(self) -> None:
        """
        Mark a dequeued URL as fully processed.

        Must be called after the URL's discovered links have been
        offered, so the counter never reads zero while work remains.

        Raises:
            ValueError: If called more times than URLs were accepted
        """
        if self._unfinished <= 0:
            raise ValueError("task_done() called too many times")

        self._unfinished -= 1
        if self._unfinished == 0:
            self._finished.set()

    async def join(self) -> None:
        """Wait until every accepted URL has been marked done."""
        await self._finished.wait()

    def close(self) -> None:
        """
        Close the frontier.

        Further offers are dropped and every waiting or future get()
        returns None. Safe to call more than once.
        """
        if self._closed:
            return

        self._closed = True
        logger.debug(
            f"Frontier closed with {len(self._items)} queued, "
            f"{self._unfinished} unfinished"
        )

        while self._getters:
            waiter = self._getters.popleft()
            if not waiter.done():
                waiter.set_result(None)

    def _wakeup_next(self) -> None:
        """Wake the first still-waiting consumer."""
        while self._getters:
            waiter = self._getters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                break

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    @property
    def unfinished(self) -> int:
        """URLs accepted but not yet marked done."""
        return self._unfinished

    def is_full(self) -> bool:
        """Check whether further offers would be dropped for capacity."""
        return len(self._items) >= self.capacity

    def __len__(self) -> int:
        return len(self._items)

    def get_stats(self) -> dict:
        """Get frontier statistics."""
        return {
            "queued": len(self._items),
            "unfinished": self._unfinished,
            "accepted": self._accepted,
            "dropped": self._dropped,
            "closed": self._closed,
        }
