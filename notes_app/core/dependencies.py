"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from notes_app.core.database import get_db_session
from notes_app.core.exceptions import AuthenticationError
from notes_app.core.security import authenticate_bearer
from notes_app.storage import StorageBackend, get_storage_backend

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

Storage = Annotated[StorageBackend, Depends(get_storage_backend)]

_bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> str:
    """
    Resolve the bearer credential to the requesting user's id.

    Raises:
        AuthenticationError: If the Authorization header is missing,
            not a bearer credential, or the token is invalid
    """
    if credentials is None:
        raise AuthenticationError("No token, authorization denied")

    user_id = authenticate_bearer(credentials.credentials)
    request.state.user_id = user_id
    structlog.contextvars.bind_contextvars(user_id=user_id)
    return user_id


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
