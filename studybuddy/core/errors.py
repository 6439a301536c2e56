"""
Error taxonomy for Study Buddy.

Every failure that can reach a user is one of these types. The API layer
maps them to HTTP responses; the study components convert them into
visible state (error phase, banner text) instead of letting them escape.
"""

from __future__ import annotations


class StudyBuddyError(Exception):
    """Base class for all user-visible failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(StudyBuddyError):
    """No signed-in identity where one is required."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(StudyBuddyError):
    """Referenced note or summarization does not exist (or is not yours)."""

    status_code = 404


class ValidationError(StudyBuddyError):
    """Missing or invalid input, rejected before any persistence call."""

    status_code = 400


class IncompleteQuizError(ValidationError):
    """Quiz submitted with unanswered questions."""

    def __init__(self, unanswered: int):
        super().__init__(f"Please answer all questions. {unanswered} remaining.")
        self.unanswered = unanswered


class ExternalServiceError(StudyBuddyError):
    """The AI collaborator failed or returned something unusable."""

    status_code = 502


class QuizGenerationError(ExternalServiceError):
    """AI output did not contain a valid question set."""


class ConfigurationError(ExternalServiceError):
    """AI collaborator is not configured (e.g. missing API key)."""

    status_code = 503


class PersistenceError(StudyBuddyError):
    """A store operation failed; the change must not be assumed applied."""

    status_code = 500


class QuizStateError(StudyBuddyError):
    """Operation is not valid in the quiz session's current phase."""

    status_code = 409
