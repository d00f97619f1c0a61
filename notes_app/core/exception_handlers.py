"""
Exception Handlers.

FastAPI exception handlers that convert application exceptions
to standardized API responses. All exceptions are logged and
returned in the ErrorResponse format.

Usage:
    from notes_app.core.exception_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from notes_app.core.config import get_app_config
from notes_app.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    DatabaseError,
    InvalidFileTypeError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    ValidationError,
)
from notes_app.core.logging import get_logger
from notes_app.schemas.base import ErrorResponse

logger = get_logger(__name__)

# Map exception types to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    InvalidFileTypeError: 400,
    PayloadTooLargeError: 413,
    AuthenticationError: 401,
    StorageError: 500,
    DatabaseError: 500,
}


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state or headers."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _detailed_errors_enabled() -> bool:
    return get_app_config().features.api_detailed_errors


def _error_response(status_code: int, response: ErrorResponse) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def application_error_handler(
    request: Request,
    exc: ApplicationError,
) -> JSONResponse:
    """
    Handle all ApplicationError subclasses.

    Converts application exceptions to JSON responses with the
    HTTP status code mapped from the exception type.
    """
    status_code = EXCEPTION_STATUS_MAP.get(type(exc), 500)
    request_id = _get_request_id(request)

    log_extra = {
        "code": exc.code,
        "message": exc.message,
        "status": status_code,
        "path": request.url.path,
        "method": request.method,
    }
    if exc.detail:
        log_extra["detail"] = exc.detail
    if request_id:
        log_extra["request_id"] = request_id

    if status_code >= 500:
        logger.error("Server error", extra=log_extra)
    else:
        logger.warning("Client error", extra=log_extra)

    response = ErrorResponse(
        message=exc.message,
        code=exc.code,
        request_id=request_id,
    )
    if isinstance(exc, ValidationError) and exc.details:
        response.details = exc.details
    if exc.detail and _detailed_errors_enabled():
        response.error = exc.detail

    return _error_response(status_code, response)


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle FastAPI/Pydantic request validation errors.

    Missing form fields and malformed bodies end up here.
    """
    request_id = _get_request_id(request)

    errors = exc.errors()
    details = {
        "validation_errors": [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Validation error"),
                "type": err.get("type", "unknown"),
            }
            for err in errors
        ]
    }

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
            "request_id": request_id,
        },
    )

    response = ErrorResponse(
        message="Request validation failed",
        code="VAL_REQUEST_INVALID",
        details=details,
        request_id=request_id,
    )
    return _error_response(422, response)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    The exception text is only returned when detailed errors are enabled.
    """
    request_id = _get_request_id(request)

    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "request_id": request_id,
        },
    )

    response = ErrorResponse(
        message="An unexpected error occurred",
        code="SYS_INTERNAL_ERROR",
        request_id=request_id,
    )
    if _detailed_errors_enabled():
        response.error = str(exc)

    return _error_response(500, response)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    logger.debug("Exception handlers registered")
