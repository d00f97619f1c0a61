"""
Security Utilities.

Bearer credential verification for the note API. Tokens are HS256 JWTs
signed with JWT_SECRET; the note owner is the `sub` claim, or `id` for
tokens minted by the legacy login flow.
"""

from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from notes_app.core.config import get_app_config, get_settings
from notes_app.core.exceptions import AuthenticationError
from notes_app.core.logging import get_logger
from notes_app.core.utils import utc_now

logger = get_logger(__name__)

USER_ID_CLAIMS = ("sub", "id")


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    to_encode = data.copy()

    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(minutes=jwt_config.access_token_expire_minutes)

    to_encode["exp"] = expire
    if jwt_config.audience:
        to_encode["aud"] = jwt_config.audience
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=jwt_config.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Signature and expiry are always checked; the audience only when
    security.jwt.audience is configured.

    Raises:
        AuthenticationError: If token is invalid or expired
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
            options={"verify_aud": bool(jwt_config.audience)},
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token")


def extract_user_id(payload: dict[str, Any]) -> str:
    """
    Return the user identifier embedded in a decoded token.

    Raises:
        AuthenticationError: If no identifier claim is present
    """
    for claim in USER_ID_CLAIMS:
        value = payload.get(claim)
        if value not in (None, ""):
            return str(value)
    raise AuthenticationError("Invalid token payload")


def authenticate_bearer(token: str | None) -> str:
    """
    Resolve a bearer credential to a user id.

    Args:
        token: Raw credential from the Authorization header, None if absent

    Returns:
        The authenticated user id

    Raises:
        AuthenticationError: If the credential is missing or invalid
    """
    if not token:
        raise AuthenticationError("No token, authorization denied")
    return extract_user_id(decode_token(token))
