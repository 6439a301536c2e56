# SQLAlchemy models
from .base import Base
from .notes import Note, Summarization, User

__all__ = [
    "Base",
    "User",
    "Note",
    "Summarization",
]
