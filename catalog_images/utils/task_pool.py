"""Concurrency valve shared by every leaf call of a run."""

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class BoundedTaskPool:
    """
    Runs submitted coroutine factories with at most ``limit`` in flight.

    Waiters are admitted in FIFO order as permits free up. There is no
    priority, cancellation or timeout here; one instance is shared by
    every product of every page so the cap is global to the run.
    """

    def __init__(self, limit: int = 5):
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self.in_flight = 0
        self.peak = 0

    async def submit(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Wait for a free permit, then run ``task()`` and return its result.

        Args:
            task: Zero-argument callable returning an awaitable

        Returns:
            Whatever the awaitable returns; exceptions propagate unchanged
        """
        async with self._semaphore:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            try:
                return await task()
            finally:
                self.in_flight -= 1
