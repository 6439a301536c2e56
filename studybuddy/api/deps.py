"""
FastAPI dependencies: database session, identity and AI collaborators.

The identity provider sits in front of the service and forwards the
signed-in user in ``X-User-*`` headers. A request without ``X-User-Id``
is anonymous.
"""
from __future__ import annotations

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from config import get_settings
from studybuddy.db.database import get_session
from studybuddy.db.models import User
from studybuddy.generation.quiz_generator import GeminiQuizGenerator
from studybuddy.integrations.gemini_client import GeminiClient, TextCompletionClient
from studybuddy.notes import ExternalIdentity, NoteStore, require_user


def get_identity(
    x_user_id: str | None = Header(None),
    x_user_name: str | None = Header(None),
    x_user_email: str | None = Header(None),
    x_user_avatar: str | None = Header(None),
) -> ExternalIdentity | None:
    if not x_user_id or not x_user_id.strip():
        return None
    return ExternalIdentity(
        id=x_user_id.strip(),
        name=x_user_name,
        email=x_user_email,
        avatar_url=x_user_avatar,
    )


def get_current_user(
    identity: ExternalIdentity | None = Depends(get_identity),
    session: Session = Depends(get_session),
) -> User:
    """The local user for the request; 401 for anonymous requests."""
    return require_user(session, identity)


def get_note_store(session: Session = Depends(get_session)) -> NoteStore:
    return NoteStore(session)


def get_completion_client() -> TextCompletionClient:
    return GeminiClient(model_name=get_settings().summary_model)


def get_quiz_generator() -> GeminiQuizGenerator:
    return GeminiQuizGenerator(GeminiClient(model_name=get_settings().quiz_model))
