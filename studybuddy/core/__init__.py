"""Core primitives shared across Study Buddy modules."""

from .errors import (
    ConfigurationError,
    ExternalServiceError,
    IncompleteQuizError,
    NotFoundError,
    PersistenceError,
    QuizGenerationError,
    QuizStateError,
    StudyBuddyError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "StudyBuddyError",
    "UnauthorizedError",
    "NotFoundError",
    "ValidationError",
    "IncompleteQuizError",
    "ExternalServiceError",
    "QuizGenerationError",
    "ConfigurationError",
    "PersistenceError",
    "QuizStateError",
]
