"""
Note Repository.

Data access layer for notes. Every lookup is scoped to the owning user;
a note owned by someone else is treated exactly like a missing one.
"""

from sqlalchemy import select

from notes_app.core.exceptions import NotFoundError
from notes_app.models.note import Note
from notes_app.repositories.base import BaseRepository

NOTE_NOT_FOUND_MESSAGE = "Note not found or unauthorized"


class NoteRepository(BaseRepository[Note]):
    """Repository for Note model."""

    model = Note

    async def get_owned_or_none(self, note_id: str, user_id: str) -> Note | None:
        """Get a note by id if it belongs to user_id."""
        result = await self.session.execute(
            select(Note)
            .where(Note.id == str(note_id))
            .where(Note.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_owned(self, note_id: str, user_id: str) -> Note:
        """
        Get a note by id if it belongs to user_id.

        Raises:
            NotFoundError: If the note is missing or owned by another user
        """
        note = await self.get_owned_or_none(note_id, user_id)
        if note is None:
            raise NotFoundError(NOTE_NOT_FOUND_MESSAGE)
        return note

    async def list_owned(
        self,
        user_id: str,
        favorites_only: bool = False,
    ) -> list[Note]:
        """
        List a user's notes, newest first.

        Args:
            user_id: Owner to filter by
            favorites_only: Only return notes marked favorite

        Returns:
            List of notes, possibly empty
        """
        query = select(Note).where(Note.user_id == user_id)
        if favorites_only:
            query = query.where(Note.is_favorite == True)  # noqa: E712
        result = await self.session.execute(
            query.order_by(Note.created_at.desc(), Note.id)
        )
        return list(result.scalars().all())
