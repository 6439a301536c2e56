"""
Identity provisioning.

Authentication happens upstream. The application only sees an external
identity (or nothing, for anonymous requests) and keeps a local User row
for it, created the first time that identity shows up.
"""
from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from studybuddy.core.errors import PersistenceError, UnauthorizedError
from studybuddy.db.models import User


@dataclass(frozen=True)
class ExternalIdentity:
    """A signed-in user as reported by the identity provider."""

    id: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None


def _find(session: Session, external_id: str) -> User | None:
    return session.scalar(select(User).where(User.external_id == external_id))


def provision_user(session: Session, identity: ExternalIdentity | None) -> User | None:
    """
    Return the local user for an identity, creating it on first sight.

    Returns:
        None for anonymous requests
    """
    if identity is None:
        return None

    try:
        user = _find(session, identity.id)
        if user is not None:
            return user

        user = User(
            external_id=identity.id,
            name=identity.name,
            email=identity.email,
            avatar_url=identity.avatar_url,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Provisioned user {user.id} for external identity {identity.id}")
        return user
    except IntegrityError:
        # Another request provisioned the same identity first
        session.rollback()
        user = _find(session, identity.id)
        if user is None:
            raise PersistenceError("Error creating user") from None
        return user
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to provision user {identity.id}: {e}")
        raise PersistenceError("Error creating user") from e


def require_user(session: Session, identity: ExternalIdentity | None) -> User:
    user = provision_user(session, identity)
    if user is None:
        raise UnauthorizedError()
    return user
