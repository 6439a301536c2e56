"""API routers for Study Buddy."""

from studybuddy.api.routers import notes_router, study_router, summarizations_router

__all__ = ["notes_router", "summarizations_router", "study_router"]
