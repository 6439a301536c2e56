"""
FastAPI application for Study Buddy.

Provides REST API for:
- Notes and their summarizations
- Summary generation and download
- Flashcards, mind map and quiz over a summarization
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.orm import Session

from config import get_settings
from studybuddy import __version__
from studybuddy.core.errors import IncompleteQuizError, StudyBuddyError
from studybuddy.db.database import check_connection, get_session, init_db
from studybuddy.logging_setup import configure_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging(settings.log_level, settings.log_file)
    logger.info("Starting Study Buddy service...")
    init_db()
    if not settings.has_ai_configured():
        logger.warning("GEMINI_API_KEY not set; summaries and quizzes will be unavailable")
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down Study Buddy service...")


app = FastAPI(
    title="Study Buddy",
    description="""
    Notes, AI summaries and study aids.

    ## Features

    - **Notes**: Titled containers owned by the signed-in user
    - **Summarizations**: Input/summary pairs saved to a note
    - **Flashcards**: Study points segmented from a summary
    - **Mind Map**: Radial layout of up to 12 study points around the note title
    - **Quiz**: AI-generated questions over a summary, scored with a letter grade
    """,
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Error Handling
# ========================================


@app.exception_handler(StudyBuddyError)
async def study_buddy_error_handler(request: Request, exc: StudyBuddyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    content: dict[str, Any] = {"error": exc.message}
    if isinstance(exc, IncompleteQuizError):
        content["unanswered"] = exc.unanswered
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {message}" if field else message},
    )


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "studybuddy",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check(session: Session = Depends(get_session)) -> dict[str, Any]:
    """Health check with an actual database round trip."""
    db_status, db_error = check_connection(session)

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "database": db_status,
            "ai": "configured" if settings.has_ai_configured() else "not_configured",
        },
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Import and mount routers
# ========================================

from studybuddy.api.routers import notes_router, study_router, summarizations_router  # noqa: E402

app.include_router(notes_router.router, prefix="/api/notes", tags=["Notes"])
app.include_router(summarizations_router.router, prefix="/api/summarizations", tags=["Summarizations"])
app.include_router(study_router.router, prefix="/api", tags=["Study"])
