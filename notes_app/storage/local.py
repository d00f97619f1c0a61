"""
Local Disk Storage.

Images are written to the uploads directory, which the app serves as static
files. References are URL paths like /uploads/1700000000000-1a2b3c4d-cat.png.
"""

import re
import secrets
import time
from pathlib import Path

from notes_app.core.concurrency import run_blocking
from notes_app.core.exceptions import StorageError
from notes_app.core.logging import get_logger
from notes_app.storage.base import ImageUpload, StorageBackend

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}


def safe_filename(filename: str, content_type: str) -> str:
    """Strip directories and unsafe characters from a client filename."""
    name = _UNSAFE_CHARS.sub("_", Path(filename or "").name).strip("._")
    if not name:
        name = "image" + _EXTENSIONS.get(content_type, "")
    return name[-100:]


def unique_filename(filename: str, content_type: str) -> str:
    """Timestamp-prefixed name that will not collide with earlier uploads."""
    millis = int(time.time() * 1000)
    return f"{millis}-{secrets.token_hex(4)}-{safe_filename(filename, content_type)}"


class LocalStorageBackend(StorageBackend):
    """Stores images under a directory on the local filesystem."""

    name = "local"

    def __init__(self, uploads_dir: Path, url_prefix: str = "/uploads") -> None:
        self.uploads_dir = Path(uploads_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def ensure_directory(self) -> None:
        self.uploads_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, reference: str) -> Path | None:
        """
        Map a reference back to a file inside the uploads directory.

        Returns None for references this backend did not produce, including
        anything that would resolve outside the uploads directory.
        """
        prefix = f"{self.url_prefix}/"
        if not reference.startswith(prefix):
            return None
        name = reference[len(prefix):]
        if not name or "/" in name or "\\" in name:
            return None
        root = self.uploads_dir.resolve()
        path = (root / name).resolve()
        if path.parent != root:
            return None
        return path

    def _write(self, name: str, data: bytes) -> None:
        self.ensure_directory()
        (self.uploads_dir / name).write_bytes(data)

    async def store(self, upload: ImageUpload) -> str:
        name = unique_filename(upload.filename, upload.content_type)
        try:
            await run_blocking(self._write, name, upload.data)
        except OSError as e:
            logger.error(
                "Failed to write image",
                extra={"file_name": name, "error": str(e)},
            )
            raise StorageError("Error in saving image", detail=str(e)) from e

        reference = f"{self.url_prefix}/{name}"
        logger.info(
            "Image stored",
            extra={"reference": reference, "size": upload.size},
        )
        return reference

    async def delete(self, reference: str) -> bool:
        path = self.path_for(reference)
        if path is None:
            logger.warning(
                "Refusing to delete unrecognised image reference",
                extra={"reference": reference},
            )
            return False

        try:
            await run_blocking(path.unlink, True)
        except OSError as e:
            logger.warning(
                "Failed to delete image",
                extra={"reference": reference, "error": str(e)},
            )
            return False

        logger.info("Image deleted", extra={"reference": reference})
        return True

    async def check(self) -> dict[str, object]:
        exists = self.uploads_dir.is_dir()
        return {
            "status": "healthy" if exists else "unhealthy",
            "backend": self.name,
            "uploads_exists": exists,
        }
