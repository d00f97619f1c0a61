"""
Storage Backend Interface.

Where an uploaded note image physically lives. The note service only talks
to this interface; the concrete backend is chosen once at startup.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageUpload:
    """A validated image upload, ready to be stored."""

    data: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class StorageBackend(ABC):
    """
    Image storage strategy.

    store() returns the reference string saved on the note; delete() takes
    that same reference back.
    """

    name: str

    @abstractmethod
    async def store(self, upload: ImageUpload) -> str:
        """
        Persist an image and return its reference.

        Raises:
            StorageError: If the object could not be stored
        """

    @abstractmethod
    async def delete(self, reference: str) -> bool:
        """
        Remove a stored image. Best-effort: failures are logged and
        reported as False, never raised.
        """

    async def check(self) -> dict[str, object]:
        """Readiness details for /health/ready."""
        return {"status": "healthy", "backend": self.name}

    async def aclose(self) -> None:
        """Release held resources. Called on application shutdown."""
