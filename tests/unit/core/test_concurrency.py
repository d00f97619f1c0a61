"""Unit tests for notes_app.core.concurrency."""

import contextvars
from unittest.mock import MagicMock, patch

import pytest
import structlog

import notes_app.core.concurrency as concurrency_module
from notes_app.core.concurrency import (
    TracedThreadPoolExecutor,
    get_io_pool,
    get_semaphore,
    run_blocking,
    shutdown_pools,
)


@pytest.fixture(autouse=True)
def _reset_pools():
    """Reset global pool state before and after each test."""
    concurrency_module._io_pool = None
    concurrency_module._semaphores.clear()
    concurrency_module._semaphore_capacities.clear()
    yield
    if concurrency_module._io_pool is not None:
        concurrency_module._io_pool.shutdown(wait=False)
        concurrency_module._io_pool = None
    concurrency_module._semaphores.clear()
    concurrency_module._semaphore_capacities.clear()


def _mock_concurrency_config(thread_max=4, external_api=7):
    mock_config = MagicMock()
    mock_config.concurrency.thread_pool.max_workers = thread_max
    mock_config.concurrency.semaphores = MagicMock(spec=["external_api"])
    mock_config.concurrency.semaphores.external_api = external_api
    return mock_config


class TestTracedThreadPoolExecutor:

    def test_propagates_contextvars(self):
        test_var = contextvars.ContextVar("test_var", default="default")
        test_var.set("from_caller")

        executor = TracedThreadPoolExecutor(max_workers=1)
        try:
            assert executor.submit(test_var.get).result(timeout=5) == "from_caller"
        finally:
            executor.shutdown(wait=True)


class TestRunBlocking:

    @pytest.mark.asyncio
    @patch("notes_app.core.config.get_app_config")
    async def test_returns_result(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config()

        assert await run_blocking(sum, [1, 2, 3]) == 6

    @pytest.mark.asyncio
    @patch("notes_app.core.config.get_app_config")
    async def test_carries_structlog_context_into_worker(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config()
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id="req-42", user_id="user-alice")
        try:
            context = await run_blocking(structlog.contextvars.get_contextvars)
        finally:
            structlog.contextvars.clear_contextvars()

        assert context["request_id"] == "req-42"
        assert context["user_id"] == "user-alice"

    @pytest.mark.asyncio
    @patch("notes_app.core.config.get_app_config")
    async def test_propagates_exceptions(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config()

        def fail():
            raise OSError("disk full")

        with pytest.raises(OSError, match="disk full"):
            await run_blocking(fail)


class TestGetIoPool:

    @patch("notes_app.core.config.get_app_config")
    def test_uses_config_max_workers(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config(thread_max=3)

        pool = get_io_pool()

        assert isinstance(pool, TracedThreadPoolExecutor)
        assert pool._max_workers == 3
        assert get_io_pool() is pool


class TestGetSemaphore:

    @patch("notes_app.core.config.get_app_config")
    def test_capacity_read_from_config(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config(external_api=7)

        sem = get_semaphore("external_api")

        assert sem._value == 7
        assert concurrency_module._semaphore_capacities["external_api"] == 7

    @patch("notes_app.core.config.get_app_config")
    def test_returns_same_instance(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config()

        assert get_semaphore("external_api") is get_semaphore("external_api")

    @patch("notes_app.core.config.get_app_config")
    def test_defaults_to_20_for_unknown(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config()

        assert get_semaphore("unconfigured")._value == 20

    def test_real_config_capacity(self):
        from notes_app.core.config import get_app_config

        expected = get_app_config().concurrency.semaphores.external_api

        assert get_semaphore("external_api")._value == expected


class TestShutdownPools:

    @pytest.mark.asyncio
    @patch("notes_app.core.config.get_app_config")
    async def test_cleans_up(self, mock_get_config):
        mock_get_config.return_value = _mock_concurrency_config()
        get_io_pool()
        get_semaphore("external_api")

        await shutdown_pools()

        assert concurrency_module._io_pool is None
        assert concurrency_module._semaphores == {}
