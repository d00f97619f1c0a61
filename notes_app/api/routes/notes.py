"""
Notes API Endpoints.

REST API endpoints for the authenticated user's notes. Create and update
take multipart forms so an image can travel with the text fields.

Static paths (/add, /favourites, /alive, /toggle-favorite/...) are declared
before the /{note_id} routes.
"""

from typing import Annotated

from fastapi import APIRouter, Form

from notes_app.core.dependencies import CurrentUserId, DbSession, Storage
from notes_app.core.uploads import OptionalImage
from notes_app.core.utils import parse_bool, utc_now_iso
from notes_app.schemas.base import MessageResponse
from notes_app.schemas.note import (
    AliveResponse,
    NoteCreate,
    NoteCreatedResponse,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    NoteUpdatedResponse,
)
from notes_app.services.note import NoteService

router = APIRouter()


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


@router.post(
    "/add",
    response_model=NoteCreatedResponse,
    status_code=201,
    summary="Create a note",
    description="Create a note from a multipart form, optionally with an image.",
)
async def add_note(
    user_id: CurrentUserId,
    db: DbSession,
    storage: Storage,
    image: OptionalImage,
    title: Annotated[str, Form(min_length=1, max_length=255)],
    description: Annotated[str, Form(min_length=1)],
    is_audio_note: Annotated[str | None, Form(alias="isAudioNote")] = None,
    audio_transcription: Annotated[str | None, Form(alias="audioTranscription")] = None,
) -> NoteCreatedResponse:
    """Create a new note."""
    data = NoteCreate(
        title=title,
        description=description,
        is_audio_note=parse_bool(is_audio_note),
        audio_transcription=audio_transcription or "",
    )
    service = NoteService(db, storage)
    note = await service.create_note(user_id, data, image)
    return NoteCreatedResponse(
        message="Created Note successfully",
        note=NoteResponse.model_validate(note),
    )


@router.get(
    "/",
    response_model=NoteListResponse,
    summary="List notes",
)
async def list_notes(
    user_id: CurrentUserId,
    db: DbSession,
    storage: Storage,
) -> NoteListResponse:
    """List all notes owned by the caller."""
    service = NoteService(db, storage)
    notes = await service.list_notes(user_id)
    return NoteListResponse(Notes=[NoteResponse.model_validate(n) for n in notes])


@router.get(
    "/favourites",
    response_model=list[NoteResponse],
    summary="List favourite notes",
)
async def list_favourites(
    user_id: CurrentUserId,
    db: DbSession,
    storage: Storage,
) -> list[NoteResponse]:
    """List the caller's notes marked favorite."""
    service = NoteService(db, storage)
    notes = await service.list_favorites(user_id)
    return [NoteResponse.model_validate(n) for n in notes]


@router.get(
    "/alive",
    response_model=AliveResponse,
    summary="Liveness probe",
)
async def alive() -> AliveResponse:
    """Unauthenticated liveness probe for infrastructure checks."""
    return AliveResponse(status="alive", timestamp=utc_now_iso())


@router.put(
    "/toggle-favorite/{note_id}",
    response_model=NoteResponse,
    summary="Toggle favorite",
)
async def toggle_favorite(
    note_id: str,
    user_id: CurrentUserId,
    db: DbSession,
    storage: Storage,
) -> NoteResponse:
    """Flip a note's favorite flag."""
    service = NoteService(db, storage)
    note = await service.toggle_favorite(note_id, user_id)
    return NoteResponse.model_validate(note)


@router.put(
    "/{note_id}",
    response_model=NoteUpdatedResponse,
    summary="Update a note",
    description=(
        "Update title and/or description. Blank fields are left unchanged. "
        "A new image replaces and deletes the previous one."
    ),
)
async def update_note(
    note_id: str,
    user_id: CurrentUserId,
    db: DbSession,
    storage: Storage,
    image: OptionalImage,
    title: Annotated[str | None, Form(max_length=255)] = None,
    description: Annotated[str | None, Form()] = None,
) -> NoteUpdatedResponse:
    """Update a note."""
    data = NoteUpdate(
        title=_blank_to_none(title),
        description=_blank_to_none(description),
    )
    service = NoteService(db, storage)
    note = await service.update_note(note_id, user_id, data, image)
    return NoteUpdatedResponse(
        message="Note updated successfully",
        note=NoteResponse.model_validate(note),
    )


@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    summary="Delete a note",
    description="Delete a note and its stored image.",
)
async def delete_note(
    note_id: str,
    user_id: CurrentUserId,
    db: DbSession,
    storage: Storage,
) -> MessageResponse:
    """Delete a note."""
    service = NoteService(db, storage)
    await service.delete_note(note_id, user_id)
    return MessageResponse(message="Note deleted successfully")
