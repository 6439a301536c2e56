"""Summarization lookup, deletion and download."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from studybuddy.api.deps import get_current_user, get_note_store
from studybuddy.api.schemas import SummarizationResponse
from studybuddy.db.models import User
from studybuddy.notes import NoteStore

router = APIRouter()

DOWNLOAD_FILENAME = "summary.txt"


@router.get("/{summarization_id}", response_model=SummarizationResponse, summary="Get summarization")
def get_summarization(
    summarization_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    return store.get_summarization(summarization_id, user.id)


@router.delete(
    "/{summarization_id}",
    response_model=SummarizationResponse,
    summary="Delete summarization",
)
def delete_summarization(
    summarization_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    """Delete a summarization; responds with the deleted record."""
    return store.delete_summarization(summarization_id, user.id)


@router.get(
    "/{summarization_id}/download",
    response_class=PlainTextResponse,
    summary="Download summary as text",
)
def download_summarization(
    summarization_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    summarization = store.get_summarization(summarization_id, user.id)
    return PlainTextResponse(
        summarization.summary,
        headers={"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'},
    )
