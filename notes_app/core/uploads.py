"""
Image Upload Handling.

Validates the optional `image` multipart field before anything is stored:
the content type must be on the allow-list and the body must not exceed
the size ceiling from storage.yaml. Nothing here writes to storage; the
note service hands the validated upload to the storage backend.
"""

from typing import Annotated

from fastapi import Depends, File, UploadFile

from notes_app.core.config import get_app_config
from notes_app.core.config_schema import StorageSchema
from notes_app.core.exceptions import InvalidFileTypeError, PayloadTooLargeError
from notes_app.core.logging import get_logger
from notes_app.storage.base import ImageUpload

logger = get_logger(__name__)


async def read_image_upload(
    file: UploadFile | None,
    storage_config: StorageSchema,
) -> ImageUpload | None:
    """
    Validate and read an uploaded image.

    Args:
        file: The multipart file, or None when no image was sent
        storage_config: Allowed content types and size ceiling

    Returns:
        The upload, or None if no file was attached

    Raises:
        InvalidFileTypeError: If the content type is not allowed
        PayloadTooLargeError: If the file exceeds max_upload_bytes
    """
    if file is None or (not file.filename and not file.size):
        return None

    content_type = (file.content_type or "").lower()
    allowed = [t.lower() for t in storage_config.allowed_content_types]
    if content_type not in allowed:
        logger.warning(
            "Rejected upload with disallowed content type",
            extra={"content_type": content_type, "file_name": file.filename},
        )
        raise InvalidFileTypeError(
            details={"content_type": content_type, "allowed": allowed},
        )

    limit = storage_config.max_upload_bytes
    data = await file.read(limit + 1)
    if len(data) > limit:
        logger.warning(
            "Rejected oversized upload",
            extra={"file_name": file.filename, "limit_bytes": limit},
        )
        raise PayloadTooLargeError(
            f"File too large. Maximum size is {limit // (1024 * 1024)}MB.",
            details={"max_bytes": limit},
        )

    return ImageUpload(
        data=data,
        filename=file.filename or "",
        content_type=content_type,
    )


async def get_image_upload(
    image: Annotated[UploadFile | None, File(description="JPEG or PNG, at most 5MB")] = None,
) -> ImageUpload | None:
    """FastAPI dependency for the optional `image` field."""
    return await read_image_upload(image, get_app_config().storage)


OptionalImage = Annotated[ImageUpload | None, Depends(get_image_upload)]
