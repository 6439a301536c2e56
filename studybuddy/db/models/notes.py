"""
Note models.

Implements:
- User: Local record for an externally authenticated identity
- Note: A user-owned titled container for summarizations
- Summarization: One input/summary text pair attached to a note

Summarizations are immutable once created; they are only ever deleted,
either directly or by cascade when their note is deleted.
"""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Local user provisioned on first sight of an external identity."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(Text)
    avatar_url: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    notes: Mapped[list[Note]] = relationship(
        back_populates="owner", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, external_id='{self.external_id}')>"


class Note(Base):
    """A titled container for summarizations, owned by exactly one user."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    owner: Mapped[User] = relationship(back_populates="notes")
    summarizations: Mapped[list[Summarization]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        order_by="desc(Summarization.created_at)",
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}')>"


class Summarization(Base):
    """An input text and its generated summary."""

    __tablename__ = "summarizations"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    note_id: Mapped[str] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    input_text: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    note: Mapped[Note] = relationship(back_populates="summarizations")

    def __repr__(self) -> str:
        return f"<Summarization(id={self.id}, note_id='{self.note_id}')>"
