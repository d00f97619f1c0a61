"""
FastAPI Application Entry Point.

This is the main entry point for the notes backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from notes_app.api import health
from notes_app.api.routes import router as api_router
from notes_app.core.concurrency import shutdown_pools
from notes_app.core.config import get_app_config, get_uploads_dir
from notes_app.core.database import create_tables, dispose_engine
from notes_app.core.exception_handlers import register_exception_handlers
from notes_app.core.logging import get_logger, setup_logging
from notes_app.core.middleware import RequestContextMiddleware
from notes_app.storage import close_storage_backend, get_storage_backend

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_config = get_app_config()
    setup_logging(level=app_config.logging.level)

    if app_config.features.security_startup_checks_enabled:
        from notes_app.core.startup_checks import run_startup_checks
        run_startup_checks()

    get_storage_backend()
    await create_tables()

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
            "storage_backend": app_config.storage.backend,
        },
    )
    yield
    logger.info("Application shutting down")
    await close_storage_backend()
    await dispose_engine()
    await shutdown_pools()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_config = get_app_config()
    app_settings = app_config.application
    docs_enabled = app_settings.debug and app_settings.docs_enabled

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        RequestContextMiddleware,
        log_requests=app_config.features.api_request_logging,
    )

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_router, prefix=app_settings.api_prefix)

    _mount_uploads(app, app_config)

    return app


def _mount_uploads(app: FastAPI, app_config) -> None:
    """Serve locally stored images when the local backend is active."""
    storage = app_config.storage
    if storage.backend != "local" or not app_config.features.storage_static_mount_enabled:
        return

    uploads_dir = get_uploads_dir()
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        storage.local.url_prefix,
        StaticFiles(directory=str(uploads_dir)),
        name="uploads",
    )
    logger.debug("Uploads directory mounted", extra={"path": str(uploads_dir)})


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    This function creates the app on first call and caches it.
    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn notes_app.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
