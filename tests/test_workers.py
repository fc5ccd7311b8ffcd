"""Tests for the worker pool and the async operation surface."""

from __future__ import annotations

import asyncio
import threading

import pytest

from shrinkray import operations
from shrinkray.aio import AsyncImageOps
from shrinkray.config import Settings
from shrinkray.errors import InvalidOption, TaskError
from shrinkray.imaging.options import ThumbnailOptions
from shrinkray.workers import WorkerPool

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_settings(**overrides: object) -> Settings:
    defaults: dict[str, object] = {
        "max_workers": 2,
        "queue_timeout": 1.0,
    }
    defaults.update(overrides)
    return Settings(**defaults)  # type: ignore[arg-type]


def _fail() -> None:
    raise InvalidOption("bad option")


# ---------------------------------------------------------------------------
# WorkerPool tests
# ---------------------------------------------------------------------------


class TestWorkerPool:
    async def test_runs_function_with_args(self) -> None:
        pool = WorkerPool(_make_settings())
        try:
            assert await pool.run(pow, 2, 10) == 1024
        finally:
            pool.shutdown()

    async def test_operation_errors_propagate_unchanged(self) -> None:
        pool = WorkerPool(_make_settings())
        try:
            with pytest.raises(InvalidOption):
                await pool.run(_fail)
        finally:
            pool.shutdown()

    async def test_closed_pool_raises_task_error(self) -> None:
        pool = WorkerPool(_make_settings())
        pool.shutdown()
        with pytest.raises(TaskError):
            await pool.run(pow, 2, 2)

    async def test_queue_timeout_raises_task_error(self) -> None:
        pool = WorkerPool(_make_settings(max_workers=1, queue_timeout=0.05))
        release = threading.Event()
        try:
            blocked = asyncio.create_task(pool.run(release.wait, 5))
            await asyncio.sleep(0.01)
            assert pool.active_count == 1

            with pytest.raises(TaskError):
                await pool.run(pow, 2, 2)

            release.set()
            assert await blocked is True
            assert pool.active_count == 0
            assert pool.queue_depth == 0
        finally:
            release.set()
            pool.shutdown()


# ---------------------------------------------------------------------------
# AsyncImageOps tests
# ---------------------------------------------------------------------------


class TestAsyncImageOps:
    async def test_same_result_as_blocking_call(self, jpeg_bytes: bytes) -> None:
        pool = WorkerPool(_make_settings())
        ops = AsyncImageOps(pool)
        try:
            options = ThumbnailOptions(width=120)
            assert await ops.metadata(jpeg_bytes) == operations.metadata(jpeg_bytes)
            assert await ops.thumbnail_buffer(jpeg_bytes, options) == operations.thumbnail_buffer(jpeg_bytes, options)
        finally:
            pool.shutdown()

    async def test_concurrent_calls_are_independent(self, jpeg_bytes: bytes, png_rgba_bytes: bytes) -> None:
        pool = WorkerPool(_make_settings(max_workers=2, queue_timeout=None))
        ops = AsyncImageOps(pool)
        try:
            first, second = await asyncio.gather(ops.metadata(jpeg_bytes), ops.metadata(png_rgba_bytes))
            assert (first.width, second.width) == (1600, 400)
        finally:
            pool.shutdown()
