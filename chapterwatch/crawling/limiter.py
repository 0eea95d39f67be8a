"""
Named bounded-concurrency queues for fetches and storage writes.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

WRITE_QUEUE = "write"
FETCH_QUEUE_PREFIX = "fetch:"


class BoundedQueue:
    """
    Admits at most ``max_concurrent`` scheduled operations at a time.

    Operations are admitted in submission order: each one is wrapped in a task
    that immediately waits on a semaphore, and asyncio semaphores wake their
    waiters first-in first-out. Completion order is not guaranteed.
    """

    def __init__(self, name: str, *, max_concurrent: int) -> None:
        if max_concurrent < 1:
            raise ValueError(f"Queue '{name}' needs max_concurrent >= 1, got {max_concurrent}.")
        self.name = name
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self.in_flight = 0
        self.peak_in_flight = 0
        self.submitted = 0

    def schedule(
        self,
        func: Callable[..., Awaitable[T]] | Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> asyncio.Task[T]:
        """
        Submit ``func`` and return a task that resolves with its result.

        Coroutine functions run on the event loop; plain callables run in a
        worker thread so blocking I/O does not stall other operations.
        """

        self.submitted += 1
        return asyncio.ensure_future(self._run(func, *args, **kwargs))

    async def _run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        async with self._semaphore:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                if inspect.iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                result = await asyncio.to_thread(functools.partial(func, *args, **kwargs))
                if inspect.isawaitable(result):
                    return await result
                return result
            finally:
                self.in_flight -= 1


class QueueRegistry:
    """
    Independently configured queues keyed by name.

    One fetch queue per adapter kind (``fetch:<kind>``) and one shared write
    queue. Fetch queues are created on first use with the configured fetch cap.
    """

    def __init__(self, *, fetch_concurrency: int = 1, write_concurrency: int = 50) -> None:
        self._fetch_concurrency = fetch_concurrency
        self._queues: dict[str, BoundedQueue] = {}
        self.configure(WRITE_QUEUE, max_concurrent=write_concurrency)

    def configure(self, name: str, *, max_concurrent: int) -> BoundedQueue:
        queue = BoundedQueue(name, max_concurrent=max_concurrent)
        self._queues[name] = queue
        return queue

    def get(self, name: str) -> BoundedQueue:
        try:
            return self._queues[name]
        except KeyError:
            raise KeyError(f"No queue configured with name '{name}'.") from None

    def fetch_queue(self, adapter: str) -> BoundedQueue:
        name = f"{FETCH_QUEUE_PREFIX}{adapter}"
        queue = self._queues.get(name)
        if queue is None:
            queue = self.configure(name, max_concurrent=self._fetch_concurrency)
        return queue

    @property
    def write_queue(self) -> BoundedQueue:
        return self._queues[WRITE_QUEUE]

    def names(self) -> list[str]:
        return sorted(self._queues)
