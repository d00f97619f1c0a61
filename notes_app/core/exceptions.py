"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """
    Base exception for all application errors.

    `detail` carries the underlying cause (e.g. the driver's error text). It is
    only rendered into responses when detailed errors are enabled.
    """

    def __init__(
        self,
        message: str,
        code: str = "SYS_INTERNAL_ERROR",
        detail: str | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found or is not owned by the caller."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict | None = None,
        code: str = "VAL_VALIDATION_ERROR",
    ) -> None:
        self.details = details or {}
        super().__init__(message, code=code)


class InvalidFileTypeError(ValidationError):
    """Raised when an uploaded file's content type is not allowed."""

    def __init__(
        self,
        message: str = "Invalid file type. Only JPEG, JPG and PNG allowed.",
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details=details, code="VAL_INVALID_FILE_TYPE")


class PayloadTooLargeError(ValidationError):
    """Raised when an uploaded file exceeds the size ceiling."""

    def __init__(
        self,
        message: str = "File too large",
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details=details, code="VAL_PAYLOAD_TOO_LARGE")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class StorageError(ApplicationError):
    """Raised when the image storage backend cannot store an object."""

    def __init__(
        self,
        message: str = "Image storage failed",
        detail: str | None = None,
    ) -> None:
        super().__init__(message, code="SYS_STORAGE_ERROR", detail=detail)


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(
        self,
        message: str = "Database error",
        detail: str | None = None,
    ) -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR", detail=detail)
