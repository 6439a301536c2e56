"""
Note/Summarization store.

Thin CRUD layer over a SQLAlchemy session. Inputs are validated before
anything touches the database, ownership is checked on every lookup that
passes an owner id (a note owned by someone else is reported as not
found), and every database failure is rolled back and re-raised as a
PersistenceError so callers never assume a failed write succeeded.
"""
from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from studybuddy.core.errors import NotFoundError, PersistenceError, ValidationError
from studybuddy.db.models import Note, Summarization


class NoteStore:
    """CRUD operations for notes and their summarizations."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, action: str) -> Generator[None, None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    # ========================================
    # Notes
    # ========================================

    def create_note(self, owner_id: str, title: str) -> Note:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title required")

        with self._guard("create note"):
            note = Note(title=title, owner_id=owner_id)
            self.session.add(note)
            self.session.commit()
            self.session.refresh(note)
        logger.info(f"Created note {note.id} for user {owner_id}")
        return note

    def list_notes(self, owner_id: str) -> list[Note]:
        """Notes owned by a user, most recently updated first."""
        with self._guard("fetch notes"):
            result = self.session.scalars(
                select(Note)
                .where(Note.owner_id == owner_id)
                .order_by(Note.updated_at.desc())
            )
            return list(result)

    def get_note(self, note_id: str, owner_id: str | None = None) -> Note:
        """A note with its summarizations attached (newest first)."""
        with self._guard("fetch note"):
            note = self.session.scalar(
                select(Note)
                .options(selectinload(Note.summarizations))
                .where(Note.id == note_id)
            )
        if note is None or (owner_id is not None and note.owner_id != owner_id):
            raise NotFoundError("Note not found")
        return note

    def update_note(self, note_id: str, title: str, owner_id: str | None = None) -> Note:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title required")

        note = self.get_note(note_id, owner_id)
        with self._guard("update note"):
            note.title = title
            self.session.commit()
            self.session.refresh(note)
        logger.info(f"Renamed note {note_id}")
        return note

    def delete_note(self, note_id: str, owner_id: str | None = None) -> None:
        """Delete a note; its summarizations go with it."""
        note = self.get_note(note_id, owner_id)
        with self._guard("delete note"):
            self.session.delete(note)
            self.session.commit()
        logger.info(f"Deleted note {note_id}")

    # ========================================
    # Summarizations
    # ========================================

    def create_summarization(
        self,
        note_id: str,
        input_text: str,
        summary: str,
        owner_id: str | None = None,
    ) -> Summarization:
        if not (input_text or "").strip() or not (summary or "").strip():
            raise ValidationError("Missing inputText or summary")

        self.get_note(note_id, owner_id)
        with self._guard("save summarization"):
            summarization = Summarization(note_id=note_id, input_text=input_text, summary=summary)
            self.session.add(summarization)
            self.session.commit()
            self.session.refresh(summarization)
        logger.info(f"Saved summarization {summarization.id} to note {note_id}")
        return summarization

    def list_summarizations(self, note_id: str, owner_id: str | None = None) -> list[Summarization]:
        """Summarizations of a note, newest first."""
        self.get_note(note_id, owner_id)
        with self._guard("fetch summarizations"):
            result = self.session.scalars(
                select(Summarization)
                .where(Summarization.note_id == note_id)
                .order_by(Summarization.created_at.desc())
            )
            return list(result)

    def get_summarization(self, summarization_id: str, owner_id: str | None = None) -> Summarization:
        with self._guard("fetch summarization"):
            summarization = self.session.scalar(
                select(Summarization)
                .options(selectinload(Summarization.note))
                .where(Summarization.id == summarization_id)
            )
        if summarization is None or (
            owner_id is not None and summarization.note.owner_id != owner_id
        ):
            raise NotFoundError("Summarization not found")
        return summarization

    def delete_summarization(self, summarization_id: str, owner_id: str | None = None) -> Summarization:
        """Delete a summarization and return the deleted record."""
        summarization = self.get_summarization(summarization_id, owner_id)
        with self._guard("delete summarization"):
            self.session.delete(summarization)
            self.session.commit()
        logger.info(f"Deleted summarization {summarization_id}")
        return summarization
