"""
Request Context Middleware.

Middleware for request tracking, timing, client identification, and context propagation.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from notes_app.core.logging import get_logger

logger = get_logger(__name__)

# Clients that identify themselves via X-Frontend-ID
KNOWN_FRONTENDS = {"web", "mobile", "api", "internal"}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds request context to every request.

    - Generates or propagates request ID (X-Request-ID header)
    - Extracts frontend identifier (X-Frontend-ID header)
    - Records request timing (X-Response-Time header)
    - Binds request context to structlog for automatic inclusion in logs
    - Stores request_id and frontend in request.state for handlers

    With request logging enabled, completed requests are logged at INFO,
    otherwise at DEBUG.
    """

    def __init__(self, app: ASGIApp, log_requests: bool = False) -> None:
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        frontend = request.headers.get("X-Frontend-ID", "unknown").lower()
        if frontend not in KNOWN_FRONTENDS:
            frontend = "unknown"

        start = time.perf_counter()

        request.state.request_id = request_id
        request.state.frontend = frontend

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
        )

        logger.debug(
            "Request started",
            extra={
                "client_host": request.client.host if request.client else None,
                "user_agent": request.headers.get("User-Agent"),
            },
        )

        try:
            response = await call_next(request)

            duration_ms = int((time.perf_counter() - start) * 1000)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"

            log = logger.info if self.log_requests else logger.debug
            log(
                "Request completed",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            return response

        except Exception as exc:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.error(
                "Request failed with exception",
                extra={
                    "duration_ms": duration_ms,
                    "error_type": type(exc).__name__,
                },
            )
            raise

        finally:
            structlog.contextvars.clear_contextvars()
