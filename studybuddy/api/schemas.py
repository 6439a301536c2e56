"""
Shared request/response models.

JSON field names are camelCase (``inputText``, ``createdAt``); the models
accept either spelling on input.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class NoteResponse(CamelModel):
    id: str
    title: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class SummarizationResponse(CamelModel):
    id: str
    note_id: str
    input_text: str
    summary: str
    created_at: datetime


class NoteDetailResponse(NoteResponse):
    """A note with its summarizations, newest first."""

    summarizations: list[SummarizationResponse] = []


class MessageResponse(BaseModel):
    message: str
