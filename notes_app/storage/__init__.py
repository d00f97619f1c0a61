"""
Image Storage.

The single place where the storage strategy is chosen. Everything else
depends on StorageBackend and receives the configured instance through
get_storage_backend().
"""

from notes_app.core.config import get_app_config, get_settings, get_uploads_dir
from notes_app.core.logging import get_logger
from notes_app.storage.base import ImageUpload, StorageBackend
from notes_app.storage.local import LocalStorageBackend
from notes_app.storage.remote import RemoteMediaStorageBackend

logger = get_logger(__name__)

_backend: StorageBackend | None = None


def build_storage_backend() -> StorageBackend:
    """Construct the backend named by storage.yaml."""
    app_config = get_app_config()
    storage = app_config.storage

    if storage.backend == "remote":
        settings = get_settings()
        remote = storage.remote
        return RemoteMediaStorageBackend(
            api_base_url=remote.api_base_url,
            cloud_name=remote.cloud_name,
            api_key=settings.media_api_key,
            api_secret=settings.media_api_secret,
            folder=remote.folder,
            max_width=remote.max_width,
            max_height=remote.max_height,
            timeout=float(app_config.application.timeouts.external_api),
        )

    return LocalStorageBackend(
        uploads_dir=get_uploads_dir(),
        url_prefix=storage.local.url_prefix,
    )


def get_storage_backend() -> StorageBackend:
    """FastAPI dependency returning the process-wide storage backend."""
    global _backend
    if _backend is None:
        _backend = build_storage_backend()
        logger.info("Storage backend selected", extra={"backend": _backend.name})
    return _backend


async def close_storage_backend() -> None:
    """Release the backend's resources. Called on application shutdown."""
    global _backend
    if _backend is not None:
        await _backend.aclose()
        _backend = None


__all__ = [
    "ImageUpload",
    "LocalStorageBackend",
    "RemoteMediaStorageBackend",
    "StorageBackend",
    "build_storage_backend",
    "close_storage_backend",
    "get_storage_backend",
]
