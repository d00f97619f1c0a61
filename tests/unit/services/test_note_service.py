"""
Unit Tests for NoteService.

Runs against the per-test SQLite database with an in-memory storage backend.
Database failures are simulated by patching the repository.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from notes_app.core.exceptions import DatabaseError, NotFoundError, StorageError
from notes_app.repositories.note import NOTE_NOT_FOUND_MESSAGE
from notes_app.schemas.note import NoteCreate, NoteUpdate
from notes_app.services.note import NoteService
from notes_app.storage.base import ImageUpload

ALICE = "user-alice"
BOB = "user-bob"


def db_failure() -> OperationalError:
    return OperationalError("INSERT", {}, Exception("database is locked"))


@pytest.fixture
def service(db_session, memory_storage) -> NoteService:
    return NoteService(db_session, memory_storage)


async def make_note(service: NoteService, user_id: str = ALICE, title: str = "Shopping", **fields):
    fields.setdefault("description", "Milk, eggs")
    return await service.create_note(user_id, NoteCreate(title=title, **fields))


class TestCreateNote:

    @pytest.mark.asyncio
    async def test_without_image(self, service, memory_storage):
        note = await make_note(service)

        assert note.id
        assert note.title == "Shopping"
        assert note.description == "Milk, eggs"
        assert note.image == ""
        assert note.user_id == ALICE
        assert note.is_favorite is False
        assert note.is_audio_note is False
        assert memory_storage.objects == {}

    @pytest.mark.asyncio
    async def test_with_image_stores_reference(self, service, memory_storage, png_upload):
        note = await service.create_note(
            ALICE, NoteCreate(title="Cat", description="photo"), png_upload
        )

        assert note.image in memory_storage.objects
        assert memory_storage.objects[note.image] == png_upload.data

    @pytest.mark.asyncio
    async def test_audio_fields_persisted(self, service):
        note = await make_note(
            service,
            is_audio_note=True,
            audio_transcription="buy milk",
        )

        assert note.is_audio_note is True
        assert note.audio_transcription == "buy milk"

    @pytest.mark.asyncio
    async def test_storage_failure_creates_nothing(self, service, memory_storage, png_upload):
        memory_storage.fail_store = True

        with pytest.raises(StorageError):
            await service.create_note(ALICE, NoteCreate(title="t", description="d"), png_upload)

        assert await service.list_notes(ALICE) == []

    @pytest.mark.asyncio
    async def test_database_failure_rolls_back_stored_image(
        self, service, memory_storage, png_upload
    ):
        with patch.object(service.repo, "create", AsyncMock(side_effect=db_failure())):
            with pytest.raises(DatabaseError) as exc_info:
                await service.create_note(
                    ALICE, NoteCreate(title="t", description="d"), png_upload
                )

        assert exc_info.value.message == "Error in creating a Note"
        assert memory_storage.objects == {}
        assert len(memory_storage.deleted) == 1

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back_stored_image(
        self, service, memory_storage, png_upload
    ):
        with patch.object(service.repo, "create", AsyncMock(side_effect=asyncio.CancelledError())):
            with pytest.raises(asyncio.CancelledError):
                await service.create_note(
                    ALICE, NoteCreate(title="t", description="d"), png_upload
                )

        assert memory_storage.objects == {}
        assert len(memory_storage.deleted) == 1


class TestListNotes:

    @pytest.mark.asyncio
    async def test_only_callers_notes(self, service):
        await make_note(service, ALICE, "a1")
        await make_note(service, ALICE, "a2")
        await make_note(service, BOB, "b1")

        titles = {n.title for n in await service.list_notes(ALICE)}

        assert titles == {"a1", "a2"}

    @pytest.mark.asyncio
    async def test_empty_for_new_user(self, service):
        assert await service.list_notes("nobody") == []

    @pytest.mark.asyncio
    async def test_favorites_subset(self, service):
        keep = await make_note(service, ALICE, "keep")
        await make_note(service, ALICE, "skip")
        other = await make_note(service, BOB, "bob's")
        await service.toggle_favorite(keep.id, ALICE)
        await service.toggle_favorite(other.id, BOB)

        favorites = await service.list_favorites(ALICE)

        assert [n.id for n in favorites] == [keep.id]


class TestUpdateNote:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, service):
        note = await make_note(service)

        updated = await service.update_note(
            note.id, ALICE, NoteUpdate(description="Milk, eggs, bread")
        )

        assert updated.title == "Shopping"
        assert updated.description == "Milk, eggs, bread"
        assert updated.image == ""

    @pytest.mark.asyncio
    async def test_no_changes_returns_note_untouched(self, service):
        note = await make_note(service)

        result = await service.update_note(note.id, ALICE, NoteUpdate())

        assert result.id == note.id
        assert result.title == "Shopping"

    @pytest.mark.asyncio
    async def test_new_image_replaces_and_deletes_old(self, service, memory_storage, png_upload):
        note = await service.create_note(ALICE, NoteCreate(title="t", description="d"), png_upload)
        old_image = note.image
        replacement = ImageUpload(data=b"new", filename="dog.png", content_type="image/png")

        updated = await service.update_note(note.id, ALICE, NoteUpdate(), replacement)

        assert updated.image != old_image
        assert memory_storage.objects[updated.image] == b"new"
        assert memory_storage.deleted == [old_image]

    @pytest.mark.asyncio
    async def test_other_users_note_not_found(self, service, memory_storage, png_upload):
        note = await make_note(service, ALICE)

        with pytest.raises(NotFoundError) as exc_info:
            await service.update_note(note.id, BOB, NoteUpdate(title="mine"), png_upload)

        assert exc_info.value.message == NOTE_NOT_FOUND_MESSAGE
        assert memory_storage.objects == {}

    @pytest.mark.asyncio
    async def test_database_failure_keeps_old_image(self, service, memory_storage, png_upload):
        note = await service.create_note(ALICE, NoteCreate(title="t", description="d"), png_upload)
        old_image = note.image
        replacement = ImageUpload(data=b"new", filename="dog.png", content_type="image/png")

        with patch.object(service.repo, "update", AsyncMock(side_effect=db_failure())):
            with pytest.raises(DatabaseError) as exc_info:
                await service.update_note(note.id, ALICE, NoteUpdate(), replacement)

        assert exc_info.value.message == "Error in updating note"
        assert old_image in memory_storage.objects
        assert old_image not in memory_storage.deleted
        assert list(memory_storage.objects) == [old_image]

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back_new_image(self, service, memory_storage, png_upload):
        note = await service.create_note(ALICE, NoteCreate(title="t", description="d"), png_upload)
        old_image = note.image
        replacement = ImageUpload(data=b"new", filename="dog.png", content_type="image/png")

        with patch.object(service.repo, "update", AsyncMock(side_effect=asyncio.CancelledError())):
            with pytest.raises(asyncio.CancelledError):
                await service.update_note(note.id, ALICE, NoteUpdate(), replacement)

        assert list(memory_storage.objects) == [old_image]
        assert old_image not in memory_storage.deleted


class TestDeleteNote:

    @pytest.mark.asyncio
    async def test_removes_record_and_image(self, service, memory_storage, png_upload):
        note = await service.create_note(ALICE, NoteCreate(title="t", description="d"), png_upload)

        await service.delete_note(note.id, ALICE)

        assert await service.list_notes(ALICE) == []
        assert memory_storage.deleted == [note.image]

    @pytest.mark.asyncio
    async def test_note_without_image_skips_storage(self, service, memory_storage):
        note = await make_note(service)

        await service.delete_note(note.id, ALICE)

        assert memory_storage.deleted == []

    @pytest.mark.asyncio
    async def test_image_delete_failure_still_deletes_record(
        self, service, memory_storage, png_upload
    ):
        note = await service.create_note(ALICE, NoteCreate(title="t", description="d"), png_upload)
        memory_storage.fail_delete = True

        await service.delete_note(note.id, ALICE)

        assert await service.list_notes(ALICE) == []

    @pytest.mark.asyncio
    async def test_database_failure_keeps_image(self, service, memory_storage, png_upload):
        note = await service.create_note(ALICE, NoteCreate(title="t", description="d"), png_upload)

        with patch.object(service.repo, "delete", AsyncMock(side_effect=db_failure())):
            with pytest.raises(DatabaseError) as exc_info:
                await service.delete_note(note.id, ALICE)

        assert exc_info.value.message == "Error in deleting note"
        assert memory_storage.deleted == []

    @pytest.mark.asyncio
    async def test_unknown_id_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_note("00000000-0000-0000-0000-000000000000", ALICE)

    @pytest.mark.asyncio
    async def test_other_users_note_left_alone(self, service):
        note = await make_note(service, ALICE)

        with pytest.raises(NotFoundError):
            await service.delete_note(note.id, BOB)

        assert len(await service.list_notes(ALICE)) == 1


class TestToggleFavorite:

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_flag(self, service):
        note = await make_note(service)

        first = await service.toggle_favorite(note.id, ALICE)
        assert first.is_favorite is True

        second = await service.toggle_favorite(note.id, ALICE)
        assert second.is_favorite is False

    @pytest.mark.asyncio
    async def test_other_users_note_not_found(self, service):
        note = await make_note(service, ALICE)

        with pytest.raises(NotFoundError):
            await service.toggle_favorite(note.id, BOB)
