"""Worker pool for the non-blocking operation surface.

Architecture:
    caller (async) -> asyncio.Semaphore(N) -> ThreadPoolExecutor(N) -> sync operation

A caller waits at most ``queue_timeout`` seconds for a free slot; after that,
or once the pool is shut down, the call fails with TaskError. Errors raised by
the operation itself propagate unchanged. A dispatched task always runs to
completion.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import BrokenExecutor, ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

from shrinkray.errors import TaskError

if TYPE_CHECKING:
    from collections.abc import Callable

    from shrinkray.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkerPool:
    """Manages the semaphore and thread pool that run image operations."""

    def __init__(self, settings: Settings) -> None:
        self._semaphore = asyncio.Semaphore(settings.max_workers)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_workers,
            thread_name_prefix="shrinkray-worker",
        )
        self._queue_timeout = settings.queue_timeout
        self._active_count: int = 0
        self._queue_depth: int = 0
        self._counter_lock = threading.Lock()
        self._closed = False

    async def run(self, func: Callable[..., T], *args: object) -> T:
        """Run a synchronous function on the pool and await its result.

        Raises:
            TaskError: If no worker slot frees up within the queue timeout, or
                the pool has been shut down.
        """
        if self._closed:
            raise TaskError("Worker pool is shut down")

        with self._counter_lock:
            self._queue_depth += 1
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._queue_timeout)
        except TimeoutError as exc:
            raise TaskError(f"No worker available within {self._queue_timeout}s") from exc
        finally:
            with self._counter_lock:
                self._queue_depth -= 1

        with self._counter_lock:
            self._active_count += 1
        try:
            loop = asyncio.get_running_loop()
            try:
                future = loop.run_in_executor(self._executor, func, *args)
            except (RuntimeError, BrokenExecutor) as exc:
                raise TaskError(f"Task could not be scheduled: {exc}") from exc
            return await future
        finally:
            self._semaphore.release()
            with self._counter_lock:
                self._active_count -= 1

    @property
    def active_count(self) -> int:
        """Number of currently running tasks."""
        with self._counter_lock:
            return self._active_count

    @property
    def queue_depth(self) -> int:
        """Number of callers waiting for a worker slot."""
        with self._counter_lock:
            return self._queue_depth

    def shutdown(self) -> None:
        """Shut down the thread pool, waiting for running tasks."""
        self._closed = True
        self._executor.shutdown(wait=True)
        logger.info("Worker pool shut down")
