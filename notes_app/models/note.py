"""
Note Model.

The only persisted entity: a user-owned note with an optional image
reference and favorite/audio flags.
"""

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notes_app.models.base import Base, TimestampMixin, UUIDMixin


class Note(UUIDMixin, TimestampMixin, Base):
    """
    Note database model.

    `image` is a storage reference (a /uploads/... path or a media URL);
    an empty string means the note has no image. `user_id` is set from
    the authenticated identity at creation and never changes.
    """

    __tablename__ = "notes"
    __table_args__ = (
        Index("ix_notes_user_id_is_favorite", "user_id", "is_favorite"),
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    image: Mapped[str] = mapped_column(
        String(1024),
        default="",
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    is_audio_note: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )
    audio_transcription: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )
    is_favorite: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, title={self.title!r})>"
