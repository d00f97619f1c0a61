"""
Health Check Endpoints.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database and storage available)
- /api/check-uploads: Whether the local uploads directory exists
"""

import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException

from notes_app.core.logging import get_logger
from notes_app.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    try:
        from sqlalchemy import text

        from notes_app.core.database import get_session_factory

        start = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))

        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {
            "status": "healthy",
            "latency_ms": latency_ms,
        }

    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {
            "status": "unhealthy",
            "error": str(e),
        }


async def check_storage() -> dict[str, Any]:
    """Check the configured image storage backend."""
    try:
        from notes_app.storage import get_storage_backend

        return await get_storage_backend().check()
    except Exception as e:
        logger.warning("Storage health check failed", extra={"error": str(e)})
        return {
            "status": "unhealthy",
            "error": str(e),
        }


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """
    Readiness check.

    Checks the database and storage backend in parallel.
    Returns 503 if any of them is unhealthy.
    """
    from notes_app.core.config import get_app_config
    timeout = get_app_config().application.timeouts.health_check

    db_result: dict[str, Any] = {"status": "unhealthy", "error": "check did not run"}
    storage_result: dict[str, Any] = {"status": "unhealthy", "error": "check did not run"}

    try:
        async with asyncio.timeout(timeout):
            async with asyncio.TaskGroup() as tg:
                db_task = tg.create_task(check_database())
                storage_task = tg.create_task(check_storage())
            db_result = db_task.result()
            storage_result = storage_task.result()
    except TimeoutError:
        logger.warning("Readiness checks timed out", extra={"timeout_seconds": timeout})

    checks = {
        "database": db_result,
        "storage": storage_result,
    }

    unhealthy_checks = [
        name for name, check in checks.items()
        if check.get("status") == "unhealthy"
    ]

    if unhealthy_checks:
        logger.warning(
            "Readiness check failed",
            extra={"unhealthy": unhealthy_checks, "checks": checks},
        )
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }


@router.get("/api/check-uploads")
async def check_uploads() -> dict[str, Any]:
    """Report whether the local uploads directory exists and where it is."""
    from notes_app.core.config import get_app_config, get_uploads_dir

    uploads_dir = get_uploads_dir()
    return {
        "uploadsExists": uploads_dir.is_dir(),
        "uploadsPath": str(uploads_dir),
        "backend": get_app_config().storage.backend,
    }
