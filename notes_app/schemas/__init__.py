# Pydantic schemas package
from notes_app.schemas.base import CamelModel, ErrorResponse, MessageResponse

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "MessageResponse",
]
