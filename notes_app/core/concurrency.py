"""
Concurrency Infrastructure.

Thread pool and semaphore management for the application.
All pools are created lazily on first access and cleaned up during shutdown.

Pools:
    _io_pool - TracedThreadPoolExecutor for blocking I/O (local image files)

Semaphores:
    Created per-dependency to limit concurrent access to external services.
    Sizing is configured in config/settings/concurrency.yaml.

Usage:
    from notes_app.core.concurrency import run_blocking, get_semaphore

    # Run blocking code in the thread pool (preserves structlog context)
    await run_blocking(path.write_bytes, data)

    # Limit concurrent access to the media API
    async with get_semaphore("external_api"):
        response = await client.post(url, data=params)
"""

import asyncio
import contextvars
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from notes_app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_io_pool: ThreadPoolExecutor | None = None
_semaphores: dict[str, asyncio.Semaphore] = {}
_semaphore_capacities: dict[str, int] = {}


class TracedThreadPoolExecutor(ThreadPoolExecutor):
    """ThreadPoolExecutor that propagates contextvars to worker threads.

    Standard ThreadPoolExecutor does not carry structlog context or the
    request_id into worker threads. This subclass copies the current
    context before dispatching.
    """

    def submit(self, fn, /, *args, **kwargs):
        ctx = contextvars.copy_context()
        return super().submit(ctx.run, fn, *args, **kwargs)


def get_io_pool() -> TracedThreadPoolExecutor:
    """Get the shared thread pool for blocking I/O operations.

    Creates the pool lazily on first call using config from concurrency.yaml.
    """
    global _io_pool
    if _io_pool is None:
        from notes_app.core.config import get_app_config
        max_workers = get_app_config().concurrency.thread_pool.max_workers
        _io_pool = TracedThreadPoolExecutor(max_workers=max_workers)
        logger.info("Thread pool created", extra={"max_workers": max_workers})
    return _io_pool


async def run_blocking(fn: Callable[..., T], *args: Any) -> T:
    """Run a blocking callable on the shared I/O pool."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_io_pool(), fn, *args)


def get_semaphore(name: str) -> asyncio.Semaphore:
    """Get a named semaphore for concurrency-limiting external calls.

    Semaphores are created lazily. The capacity is read from concurrency.yaml
    under `semaphores.<name>`. If the name is not configured, defaults to 20.
    """
    if name not in _semaphores:
        from notes_app.core.config import get_app_config
        semaphore_config = get_app_config().concurrency.semaphores
        capacity = getattr(semaphore_config, name, 20)
        _semaphores[name] = asyncio.Semaphore(capacity)
        _semaphore_capacities[name] = capacity
        logger.debug("Semaphore created", extra={"name": name, "capacity": capacity})
    return _semaphores[name]


async def shutdown_pools() -> None:
    """Shut down all pools gracefully. Called during application shutdown.

    Pool shutdown is blocking, so we run it in a thread to avoid stalling
    the event loop during graceful shutdown.
    """
    global _io_pool

    if _io_pool is not None:
        await asyncio.to_thread(_io_pool.shutdown, wait=True)
        logger.info("Thread pool shut down")
        _io_pool = None

    _semaphores.clear()
    _semaphore_capacities.clear()
    logger.debug("Semaphores cleared")
