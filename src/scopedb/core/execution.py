"""Execution strategies for fanning work out across concurrent workers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from threading import Event
from typing import TypeVar

from .interfaces import OperationCancelled

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ExecutionStrategy(str, Enum):
    """How ``run_concurrently`` schedules its workers."""

    THREADS = "threads"
    TASKS = "tasks"


class CancellationToken:
    """Cooperative cancellation flag passed from the caller down to commits."""

    def __init__(self) -> None:
        self._event = Event()

    def cancel(self) -> None:
        """Request cancellation of all work observing this token."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``OperationCancelled`` if cancellation was requested."""
        if self._event.is_set():
            raise OperationCancelled("Operation was cancelled")


def run_in_threads(
    work: Callable[[T], int], items: Sequence[T], concurrency: int
) -> tuple[int, list[BaseException]]:
    """Run ``work`` for every item on a thread pool.

    Returns the summed worker results and every exception raised, in
    completion order.
    """
    total = 0
    errors: list[BaseException] = []
    with ThreadPoolExecutor(
        max_workers=concurrency, thread_name_prefix="scopedb-worker"
    ) as pool:
        futures = [pool.submit(work, item) for item in items]
        for future in as_completed(futures):
            try:
                total += future.result()
            except Exception as exc:  # pylint: disable=broad-except
                LOGGER.debug("Worker failed: %r", exc)
                errors.append(exc)
    return total, errors


async def run_as_tasks(
    work: Callable[[T], Awaitable[int]], items: Sequence[T], concurrency: int
) -> tuple[int, list[BaseException]]:
    """Run ``work`` for every item as asyncio tasks, at most ``concurrency`` at once."""
    semaphore = asyncio.Semaphore(concurrency)

    async def bounded(item: T) -> int:
        async with semaphore:
            return await work(item)

    results = await asyncio.gather(
        *(bounded(item) for item in items), return_exceptions=True
    )

    total = 0
    errors: list[BaseException] = []
    for result in results:
        if isinstance(result, BaseException):
            LOGGER.debug("Worker failed: %r", result)
            errors.append(result)
        else:
            total += result
    return total, errors


__all__ = [
    "CancellationToken",
    "ExecutionStrategy",
    "run_as_tasks",
    "run_in_threads",
]
