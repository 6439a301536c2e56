"""Notes, summarizations and the users who own them."""

from .identity import ExternalIdentity, provision_user, require_user
from .note_store import NoteStore

__all__ = ["ExternalIdentity", "provision_user", "require_user", "NoteStore"]
