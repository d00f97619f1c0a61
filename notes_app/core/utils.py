"""
Core Utilities.

Shared utility functions used across the backend.
All modules should import utilities from this module.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This ensures consistent behavior across
    the codebase and simplifies database storage.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_iso(value: datetime) -> str:
    """
    Format a datetime as ISO 8601 UTC with millisecond precision and a
    trailing Z. Naive values are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with a trailing Z."""
    return to_utc_iso(datetime.now(timezone.utc))


def parse_bool(value: str | bool | None, default: bool = False) -> bool:
    """Interpret a multipart form flag ("true", "1", "on", ...) as a bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if not normalized:
        return default
    return normalized in {"true", "1", "yes", "on"}
