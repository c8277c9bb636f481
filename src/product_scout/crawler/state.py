"""
Deduplication and result state for a crawl job.

VisitedSet and ResultSet each carry their own lock, held only for a
single check-and-mutate.
"""

import asyncio


class VisitedSet:
    """
    URLs already enqueued or fetched during one crawl job.

    Only grows; a URL admitted once is never admitted again, which is
    what guarantees each URL is fetched at most once.
    """

    def __init__(self) -> None:
        self._urls: set[str] = set()
        self._lock = asyncio.Lock()

    async def mark(self, url: str) -> bool:
        """
        Mark a URL visited.

        Returns:
            True if the URL was new, False if it had been seen before
        """
        async with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)


class ResultSet:
    """
    Product URLs collected by a crawl job, capped at a limit.

    Once the set holds ``limit`` URLs it refuses further additions.
    """

    def __init__(self, limit: int) -> None:
        """
        Args:
            limit: Maximum number of product URLs to keep
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")

        self.limit = limit
        self._urls: set[str] = set()
        self._lock = asyncio.Lock()

    async def add(self, url: str) -> int | None:
        """
        Record a product URL if there is room and it is new.

        Returns:
            New size of the set, or None if the URL was not added
        """
        async with self._lock:
            if len(self._urls) >= self.limit or url in self._urls:
                return None
            self._urls.add(url)
            return len(self._urls)

    def is_full(self) -> bool:
        """Check whether the limit has been reached."""
        return len(self._urls) >= self.limit

    def snapshot(self) -> set[str]:
        """Copy of the collected URLs."""
        return set(self._urls)

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)
