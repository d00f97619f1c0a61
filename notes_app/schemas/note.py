"""
Note Schemas.

Pydantic schemas for note API request/response validation. JSON keys are
camelCase (userId, isFavorite, ...).
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from notes_app.core.utils import to_utc_iso
from notes_app.schemas.base import CamelModel


class NoteCreate(CamelModel):
    """Fields for a new note, parsed from the multipart form."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    is_audio_note: bool = False
    audio_transcription: str = ""


class NoteUpdate(CamelModel):
    """
    Fields for updating a note.

    None means "leave unchanged"; blank strings are normalised to None by
    the endpoint so they never clear a field.
    """

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None


class NoteResponse(CamelModel):
    """Schema for note in API responses."""

    id: str = Field(description="Note unique identifier")
    title: str
    description: str
    image: str = Field(description="Image reference, empty when the note has no image")
    user_id: str
    is_audio_note: bool
    audio_transcription: str
    is_favorite: bool
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_utc_iso(value)


class NoteCreatedResponse(BaseModel):
    message: str
    note: NoteResponse


class NoteListResponse(BaseModel):
    success: bool = True
    Notes: list[NoteResponse]


class NoteUpdatedResponse(BaseModel):
    success: bool = True
    message: str
    note: NoteResponse


class AliveResponse(BaseModel):
    status: str
    timestamp: str
