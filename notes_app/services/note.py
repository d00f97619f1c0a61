"""
Note Service.

Business logic layer for notes. Every operation is scoped to the requesting
user and keeps stored images consistent with note records:

- A newly stored image is deleted again if the note is not persisted,
  including when the request is cancelled mid-operation.
- An image replaced by an update is deleted only after the update commits.
- Delete commits the record removal, then deletes the image. If the storage
  backend fails, the failure is logged and the delete still succeeds,
  leaving an orphaned object rather than refusing the user's delete. A
  failed record delete leaves the image untouched.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from notes_app.models.note import Note
from notes_app.repositories.note import NoteRepository
from notes_app.schemas.note import NoteCreate, NoteUpdate
from notes_app.services.base import BaseService
from notes_app.storage.base import ImageUpload, StorageBackend


class NoteService(BaseService):
    """Service for the owner-scoped note lifecycle."""

    def __init__(self, session: AsyncSession, storage: StorageBackend) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self.storage = storage

    async def _get_owned(self, note_id: str, user_id: str) -> Note:
        return await self._execute_db_operation(
            "Error in retrieving note",
            self.repo.get_owned(note_id, user_id),
        )

    async def _discard_image(self, reference: str, reason: str) -> None:
        """Best-effort removal of a stored image; failures are only logged."""
        try:
            deleted = await self.storage.delete(reference)
        except Exception as e:
            self._logger.error(
                "Image cleanup raised",
                extra={"reference": reference, "reason": reason, "error": str(e)},
            )
            return
        if not deleted:
            self._logger.error(
                "Image cleanup failed, object may be orphaned",
                extra={"reference": reference, "reason": reason},
            )

    async def create_note(
        self,
        user_id: str,
        data: NoteCreate,
        image: ImageUpload | None = None,
    ) -> Note:
        """
        Create a note owned by user_id, storing the image first if given.

        Raises:
            StorageError: If the image cannot be stored
            DatabaseError: If the note cannot be persisted (image rolled back)
        """
        self._log_operation("Creating note", user_id=user_id, has_image=image is not None)

        reference = await self.storage.store(image) if image is not None else ""

        async def persist() -> Note:
            note = await self.repo.create(
                title=data.title,
                description=data.description,
                image=reference,
                user_id=user_id,
                is_audio_note=data.is_audio_note,
                audio_transcription=data.audio_transcription,
            )
            await self._commit()
            return note

        persisted = False
        try:
            note = await self._execute_db_operation("Error in creating a Note", persist())
            persisted = True
        finally:
            if reference and not persisted:
                await self._discard_image(reference, "create_failed")

        self._log_debug("Note created", note_id=note.id)
        return note

    async def list_notes(self, user_id: str) -> list[Note]:
        """All notes owned by user_id."""
        return await self._execute_db_operation(
            "Error in retrieving notes",
            self.repo.list_owned(user_id),
        )

    async def list_favorites(self, user_id: str) -> list[Note]:
        """Notes owned by user_id that are marked favorite."""
        return await self._execute_db_operation(
            "Error fetching favourite notes",
            self.repo.list_owned(user_id, favorites_only=True),
        )

    async def update_note(
        self,
        note_id: str,
        user_id: str,
        data: NoteUpdate,
        image: ImageUpload | None = None,
    ) -> Note:
        """
        Update title/description and optionally replace the image.

        Fields left as None are not touched. Without a new image the existing
        reference is kept.

        Raises:
            NotFoundError: If the note is missing or not owned by user_id
            StorageError: If the new image cannot be stored
            DatabaseError: If the update cannot be persisted (new image rolled back)
        """
        note = await self._get_owned(note_id, user_id)

        changes = data.model_dump(exclude_none=True)
        previous_image = note.image
        new_image = ""
        if image is not None:
            new_image = await self.storage.store(image)
            changes["image"] = new_image

        if not changes:
            return note

        self._log_operation("Updating note", note_id=note_id, fields=list(changes))

        async def persist() -> Note:
            updated = await self.repo.update(note, **changes)
            await self._commit()
            return updated

        persisted = False
        try:
            note = await self._execute_db_operation("Error in updating note", persist())
            persisted = True
        finally:
            if new_image and not persisted:
                await self._discard_image(new_image, "update_failed")

        if new_image and previous_image:
            await self._discard_image(previous_image, "superseded")

        return note

    async def delete_note(self, note_id: str, user_id: str) -> None:
        """
        Delete a note and its stored image.

        Raises:
            NotFoundError: If the note is missing or not owned by user_id
            DatabaseError: If the record cannot be deleted
        """
        note = await self._get_owned(note_id, user_id)
        image = note.image
        self._log_operation("Deleting note", note_id=note_id)

        async def remove() -> None:
            await self.repo.delete(note)
            await self._commit()

        await self._execute_db_operation("Error in deleting note", remove())

        if image:
            await self._discard_image(image, "note_deleted")

    async def toggle_favorite(self, note_id: str, user_id: str) -> Note:
        """
        Flip the note's favorite flag.

        Raises:
            NotFoundError: If the note is missing or not owned by user_id
        """
        note = await self._get_owned(note_id, user_id)

        async def persist() -> Note:
            updated = await self.repo.update(note, is_favorite=not note.is_favorite)
            await self._commit()
            return updated

        note = await self._execute_db_operation("Error toggling favorite", persist())
        self._log_operation("Toggled favorite", note_id=note_id, is_favorite=note.is_favorite)
        return note
