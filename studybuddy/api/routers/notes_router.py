"""
Notes router.

Endpoints for:
- Note CRUD for the signed-in user
- Listing and saving the summarizations of a note
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import Field

from studybuddy.api.deps import get_current_user, get_note_store
from studybuddy.api.schemas import (
    CamelModel,
    MessageResponse,
    NoteDetailResponse,
    NoteResponse,
    SummarizationResponse,
)
from studybuddy.db.models import User
from studybuddy.notes import NoteStore

router = APIRouter()


# ========================================
# Request Models
# ========================================


class NoteCreateRequest(CamelModel):
    title: str = Field("", description="Note title (required, non-blank)")


class NoteUpdateRequest(CamelModel):
    title: str = Field("", description="New title (required, non-blank)")


class SummarizationCreateRequest(CamelModel):
    input_text: str = Field("", description="Text that was summarized")
    summary: str = Field("", description="Generated summary")


# ========================================
# Note Endpoints
# ========================================


@router.get("", response_model=list[NoteResponse], summary="List notes")
def list_notes(
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    """Notes of the signed-in user, most recently updated first."""
    return store.list_notes(user.id)


@router.post(
    "",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create note",
)
def create_note(
    request: NoteCreateRequest,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    return store.create_note(user.id, request.title)


@router.get("/{note_id}", response_model=NoteDetailResponse, summary="Get note")
def get_note(
    note_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    """A note with its summarizations attached."""
    return store.get_note(note_id, user.id)


@router.put("/{note_id}", response_model=NoteResponse, summary="Rename note")
def update_note(
    note_id: str,
    request: NoteUpdateRequest,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    return store.update_note(note_id, request.title, user.id)


@router.delete("/{note_id}", response_model=MessageResponse, summary="Delete note")
def delete_note(
    note_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    """Delete a note and all of its summarizations."""
    store.delete_note(note_id, user.id)
    return MessageResponse(message="Note deleted")


# ========================================
# Summarization Endpoints
# ========================================


@router.get(
    "/{note_id}/summarizations",
    response_model=list[SummarizationResponse],
    summary="List summarizations of a note",
)
def list_summarizations(
    note_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    return store.list_summarizations(note_id, user.id)


@router.post(
    "/{note_id}/summarizations",
    response_model=SummarizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a summarization to a note",
)
def create_summarization(
    note_id: str,
    request: SummarizationCreateRequest,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    return store.create_summarization(note_id, request.input_text, request.summary, user.id)
