"""
Bounded-concurrency fan-out for the pipelines.

The same primitive is used at every level of the extraction pipeline
(documents, segments within a document, attempts within a segment) and for
embedding enrichment during sync. It is a task queue drained by a fixed
number of asyncio workers:

    - at most ``limit`` tasks run at the same time
    - outcomes are yielded in completion order, each tagged with the index
      of its input so callers can pair results positionally
    - a failing task never cancels its siblings; its exception is returned
      in the outcome and the caller decides whether that is fatal

Python Learning Notes:
    - asyncio gives cooperative concurrency on a single thread; tasks only
      switch at ``await`` points
    - An async generator (``async def`` with ``yield``) is consumed with
      ``async for``
    - ``except Exception`` does not catch CancelledError
"""

import asyncio
from dataclasses import dataclass
from typing import (Any, AsyncIterator, Awaitable, Callable, Generic, List,
                    Optional, Sequence, TypeVar)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskOutcome(Generic[T, R]):
    """
    Result of one scheduled task.

    Attributes:
        index: Position of the task's input in the submitted sequence
        item: The input itself
        value: Return value when the task succeeded
        error: Exception raised by the task, if any
    """

    index: int
    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ConcurrencyScheduler:
    """
    Runs async tasks over a sequence of inputs with a concurrency cap.

    Attributes:
        limit (int): Maximum number of tasks in flight.
        on_complete (Optional[Callable[[TaskOutcome], None]]): Called once
            per finished task, synchronously, before the outcome is yielded.

    Example:
        scheduler = ConcurrencyScheduler(limit=3)

        async for outcome in scheduler.imap(segments, process_segment):
            if outcome.ok:
                records.extend(outcome.value)
            else:
                logger.error("Segment %d failed: %s", outcome.index, outcome.error)
    """

    def __init__(
        self,
        limit: int,
        on_complete: Optional[Callable[[TaskOutcome], None]] = None,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.on_complete = on_complete

    async def imap(
        self, items: Sequence[T], func: Callable[[T], Awaitable[R]]
    ) -> AsyncIterator[TaskOutcome[T, R]]:
        """
        Yield one TaskOutcome per input as tasks complete.

        Args:
            items: Inputs to process.
            func: Coroutine function applied to each input.

        Yields:
            TaskOutcome: In completion order. Exactly ``len(items)`` outcomes
                are yielded before the generator finishes.
        """
        items = list(items)
        if not items:
            return

        pending: asyncio.Queue = asyncio.Queue()
        for index, item in enumerate(items):
            pending.put_nowait((index, item))
        finished: asyncio.Queue = asyncio.Queue()

        async def worker() -> None:
            while True:
                try:
                    index, item = pending.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    outcome = TaskOutcome(index=index, item=item, value=await func(item))
                except Exception as e:
                    outcome = TaskOutcome(index=index, item=item, error=e)
                finished.put_nowait(outcome)

        workers = [
            asyncio.create_task(worker()) for _ in range(min(self.limit, len(items)))
        ]

        try:
            for _ in range(len(items)):
                outcome = await finished.get()
                if self.on_complete:
                    self.on_complete(outcome)
                yield outcome
        finally:
            # Only reached with live workers if the consumer stopped early
            for task in workers:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

    async def map(
        self, items: Sequence[T], func: Callable[[T], Awaitable[R]]
    ) -> List[TaskOutcome[T, R]]:
        """
        Run every task and return the outcomes ordered by input index.

        Args:
            items: Inputs to process.
            func: Coroutine function applied to each input.

        Returns:
            List[TaskOutcome]: ``outcomes[i]`` belongs to ``items[i]``.
        """
        outcomes: List[Any] = [None] * len(items)
        async for outcome in self.imap(items, func):
            outcomes[outcome.index] = outcome
        return outcomes
