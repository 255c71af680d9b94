"""
Unit tests for the ConcurrencyScheduler.

Test Categories:
    - Concurrency bound: never more than ``limit`` tasks in flight
    - Failure isolation: errors are returned, siblings keep running
    - Ordering: imap yields in completion order, map in index order
    - Callbacks: on_complete fires once per task

Python Learning Notes:
    - asyncio.sleep() inside a task yields control so others can run
    - Counting in-flight tasks is safe without locks on a single event loop
"""

import asyncio

import pytest

from budgetproposals.utils.scheduler import ConcurrencyScheduler, TaskOutcome


class TestConcurrencyScheduler:
    """Tests for ConcurrencyScheduler.imap() and map()."""

    @pytest.mark.asyncio
    async def test_never_exceeds_limit(self):
        in_flight = 0
        peak = 0

        async def task(item):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return item * 2

        scheduler = ConcurrencyScheduler(limit=3)
        outcomes = await scheduler.map(list(range(10)), task)

        assert peak == 3
        assert [outcome.value for outcome in outcomes] == [i * 2 for i in range(10)]

    @pytest.mark.asyncio
    async def test_failures_are_returned_not_raised(self):
        finished = []

        async def task(item):
            await asyncio.sleep(0.001 * item)
            if item == 1:
                raise ValueError("bad item")
            finished.append(item)
            return item

        outcomes = await ConcurrencyScheduler(limit=2).map([0, 1, 2, 3], task)

        assert sorted(finished) == [0, 2, 3]
        assert not outcomes[1].ok
        assert isinstance(outcomes[1].error, ValueError)
        assert [outcome.ok for outcome in outcomes] == [True, False, True, True]

    @pytest.mark.asyncio
    async def test_imap_yields_in_completion_order(self):
        async def task(delay):
            await asyncio.sleep(delay)
            return delay

        scheduler = ConcurrencyScheduler(limit=3)
        order = [
            outcome.index async for outcome in scheduler.imap([0.03, 0.0, 0.01], task)
        ]

        assert order == [1, 2, 0]

    @pytest.mark.asyncio
    async def test_on_complete_called_once_per_task(self):
        seen = []

        async def task(item):
            if item == "b":
                raise RuntimeError("nope")
            return item.upper()

        scheduler = ConcurrencyScheduler(limit=2, on_complete=seen.append)
        await scheduler.map(["a", "b", "c"], task)

        assert len(seen) == 3
        assert all(isinstance(outcome, TaskOutcome) for outcome in seen)
        assert sorted(outcome.item for outcome in seen) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_empty_input(self):
        async def task(item):
            return item

        assert await ConcurrencyScheduler(limit=3).map([], task) == []

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            ConcurrencyScheduler(limit=0)
