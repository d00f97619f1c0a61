"""
Base Schemas.

Shared API schemas: camelCase serialization and the error envelope.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API bodies whose JSON keys are camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    Standard error response.

    `error` holds the internal failure detail and is omitted unless detailed
    errors are enabled in features.yaml.
    """

    success: bool = False
    message: str
    code: str
    details: dict[str, Any] | None = None
    error: str | None = None
    request_id: str | None = None


class MessageResponse(BaseModel):
    """Acknowledgement with no payload."""

    success: bool = True
    message: str
