"""
ORM Base.

Declarative base and the column mixins shared by the notes table. Ids are
UUID4 strings; timestamps are naive UTC (see notes_app.core.utils.utc_now).
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from notes_app.core.utils import utc_now

ID_LENGTH = 36


def new_id() -> str:
    """Primary key value for a new row."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Every table registers on Base.metadata."""


class UUIDMixin:
    """String UUID primary key, assigned client-side before the INSERT."""

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)


class TimestampMixin:
    """created_at is set once on insert; updated_at moves on every UPDATE."""

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
