"""
Tests for the crawl frontier.

Tests FIFO order, capacity drops, closing and completion tracking.
"""

import asyncio

import pytest

from product_scout.crawler import Frontier


class TestFrontierOffer:
    """Tests for enqueueing."""

    def test_invalid_capacity(self):
        """Capacity below one should be rejected."""
        with pytest.raises(ValueError):
            Frontier(capacity=0)

    @pytest.mark.asyncio
    async def test_fifo_order(self):
        """URLs come out in the order they were offered."""
        frontier = Frontier()
        for url in ("a", "b", "c"):
            frontier.offer(url)

        assert [await frontier.get() for _ in range(3)] == ["a", "b", "c"]

    def test_offer_beyond_capacity_dropped(self):
        """Offers past capacity are dropped without blocking."""
        frontier = Frontier(capacity=2)

        assert frontier.offer("a")
        assert frontier.offer("b")
        assert not frontier.offer("c")
        assert len(frontier) == 2
        assert frontier.is_full()
        assert frontier.get_stats()["dropped"] == 1

    def test_never_exceeds_capacity(self):
        """The frontier never holds more than its capacity."""
        frontier = Frontier(capacity=10)

        for i in range(100):
            frontier.offer(f"https://shop.test/{i}")

        assert len(frontier) == 10
        assert frontier.unfinished == 10

    def test_offer_after_close_dropped(self):
        """Closed frontiers accept nothing."""
        frontier = Frontier()
        frontier.close()

        assert not frontier.offer("a")
        assert len(frontier) == 0
        assert frontier.unfinished == 0


class TestFrontierGet:
    """Tests for dequeueing and closing."""

    @pytest.mark.asyncio
    async def test_get_waits_for_offer(self):
        """A waiting consumer is woken by a new offer."""
        frontier = Frontier()
        getter = asyncio.create_task(frontier.get())
        await asyncio.sleep(0)

        assert not getter.done()

        frontier.offer("a")

        assert await asyncio.wait_for(getter, 1) == "a"

    @pytest.mark.asyncio
    async def test_close_releases_waiters(self):
        """Closing wakes every waiting consumer with None."""
        frontier = Frontier()
        getters = [asyncio.create_task(frontier.get()) for _ in range(3)]
        await asyncio.sleep(0)

        frontier.close()

        assert await asyncio.wait_for(asyncio.gather(*getters), 1) == [None, None, None]

    @pytest.mark.asyncio
    async def test_get_after_close_returns_none(self):
        """Queued URLs are abandoned once the frontier is closed."""
        frontier = Frontier()
        frontier.offer("a")
        frontier.close()

        assert await frontier.get() is None
        assert frontier.closed

    def test_close_idempotent(self):
        """Closing twice is harmless."""
        frontier = Frontier()
        frontier.close()
        frontier.close()

        assert frontier.closed

    @pytest.mark.asyncio
    async def test_cancelled_getter_does_not_lose_wakeup(self):
        """A cancelled consumer passes its wakeup on."""
        frontier = Frontier()
        first = asyncio.create_task(frontier.get())
        second = asyncio.create_task(frontier.get())
        await asyncio.sleep(0)

        frontier.offer("a")
        first.cancel()

        assert await asyncio.wait_for(second, 1) == "a"


class TestFrontierCompletion:
    """Tests for the unfinished-work counter."""

    @pytest.mark.asyncio
    async def test_join_returns_immediately_when_empty(self):
        """A frontier with no accepted work is already drained."""
        frontier = Frontier()

        await asyncio.wait_for(frontier.join(), 1)

    @pytest.mark.asyncio
    async def test_join_waits_for_task_done(self):
        """Drained means every dequeued URL was marked done."""
        frontier = Frontier()
        frontier.offer("a")
        await frontier.get()

        waiter = asyncio.create_task(frontier.join())
        await asyncio.sleep(0)

        assert len(frontier) == 0
        assert not waiter.done()

        frontier.task_done()

        await asyncio.wait_for(waiter, 1)
        assert frontier.unfinished == 0

    @pytest.mark.asyncio
    async def test_work_offered_before_done_keeps_frontier_open(self):
        """Links offered while processing keep the counter above zero."""
        frontier = Frontier()
        frontier.offer("a")
        await frontier.get()

        frontier.offer("b")
        frontier.task_done()

        assert frontier.unfinished == 1

    def test_task_done_too_many_times(self):
        """Unbalanced task_done() is an error."""
        frontier = Frontier()

        with pytest.raises(ValueError):
            frontier.task_done()
