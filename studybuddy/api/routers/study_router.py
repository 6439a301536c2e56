"""
Study router.

Endpoints for:
- Flashcard points and autoplay speeds for a summarization
- Radial mind-map layout for a summarization
- Quiz generation over a summarization, and stateless scoring
- Summary generation from free text
"""
from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import Field

from config import get_settings
from studybuddy.api.deps import (
    get_completion_client,
    get_current_user,
    get_note_store,
    get_quiz_generator,
)
from studybuddy.api.schemas import CamelModel, SummarizationResponse
from studybuddy.core.errors import IncompleteQuizError, QuizGenerationError, ValidationError
from studybuddy.db.models import User
from studybuddy.generation.summarizer import SummaryOptions, generate_summary
from studybuddy.integrations.gemini_client import TextCompletionClient
from studybuddy.notes import NoteStore
from studybuddy.study import flashcards, mindmap
from studybuddy.study.quiz_engine import (
    Difficulty,
    QuestionType,
    QuizConfig,
    QuizGenerator,
    QuizQuestion,
    score_quiz,
)
from studybuddy.study.segmentation import source_text, study_points

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class FlashcardsResponse(CamelModel):
    summarization_id: str
    points: list[str]
    count: int
    interval_ms: int
    speeds: dict[str, int]
    empty_message: str | None = None


class MindMapNodeResponse(CamelModel):
    id: str
    label: str
    full_text: str
    is_center: bool
    x: float
    y: float
    angle_degrees: float | None = None


class MindMapEdgeResponse(CamelModel):
    id: str
    source: str
    target: str


class MindMapResponse(CamelModel):
    summarization_id: str
    title: str
    radius: float
    nodes: list[MindMapNodeResponse]
    edges: list[MindMapEdgeResponse]
    empty_message: str | None = None


class QuizGenerateRequest(CamelModel):
    """Omitted fields fall back to the configured quiz defaults."""

    num_questions: int | None = Field(None, ge=3, le=15)
    difficulty: Difficulty | None = None
    question_type: QuestionType | None = None


class QuizConfigResponse(CamelModel):
    num_questions: int
    difficulty: str
    question_type: str


class QuizGenerateResponse(CamelModel):
    summarization_id: str
    config: QuizConfigResponse
    questions: list[QuizQuestion]


class QuizScoreRequest(CamelModel):
    questions: list[QuizQuestion] = Field(..., min_length=1)
    answers: dict[int, str] = Field(default_factory=dict, description="Question index -> choice")
    started_at: datetime | None = None
    ended_at: datetime | None = None


class QuestionOutcomeResponse(CamelModel):
    index: int
    question: str
    chosen: str | None
    correct: str
    is_correct: bool
    explanation: str
    concept: str | None = None


class QuizResultsResponse(CamelModel):
    score: int
    total: int
    percentage: int
    grade: str
    elapsed_seconds: int
    outcomes: list[QuestionOutcomeResponse]


class SummarizeRequest(CamelModel):
    text: str = Field("", description="Text to summarize")
    options: SummaryOptions = Field(default_factory=SummaryOptions)
    note_id: str | None = Field(None, description="Save the result to this note")


class SummarizeResponse(CamelModel):
    summary: str
    summarization: SummarizationResponse | None = None


# ========================================
# Flashcards & Mind Map
# ========================================


@router.get(
    "/summarizations/{summarization_id}/flashcards",
    response_model=FlashcardsResponse,
    summary="Flashcard points for a summarization",
)
def get_flashcards(
    summarization_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    summarization = store.get_summarization(summarization_id, user.id)
    points = study_points(summarization)
    return FlashcardsResponse(
        summarization_id=summarization.id,
        points=points,
        count=len(points),
        interval_ms=get_settings().flashcard_default_interval_ms,
        speeds={speed.name.lower(): speed.value for speed in flashcards.AutoplaySpeed},
        empty_message=None if points else flashcards.EMPTY_MESSAGE,
    )


@router.get(
    "/summarizations/{summarization_id}/mindmap",
    response_model=MindMapResponse,
    summary="Mind-map layout for a summarization",
)
def get_mindmap(
    summarization_id: str,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
):
    """Center node labelled with the note title plus up to 12 study points."""
    summarization = store.get_summarization(summarization_id, user.id)
    title = summarization.note.title or mindmap.DEFAULT_TITLE
    result = mindmap.layout(study_points(summarization), title)
    return MindMapResponse(
        summarization_id=summarization.id,
        title=title,
        radius=result.radius,
        nodes=[MindMapNodeResponse(**asdict(n), angle_degrees=n.angle_degrees) for n in result.nodes],
        edges=[MindMapEdgeResponse(**asdict(e)) for e in result.edges],
        empty_message=mindmap.EMPTY_MESSAGE if result.is_empty else None,
    )


# ========================================
# Quiz
# ========================================


@router.post(
    "/summarizations/{summarization_id}/quiz",
    response_model=QuizGenerateResponse,
    summary="Generate a quiz over a summarization",
)
async def generate_quiz(
    summarization_id: str,
    request: QuizGenerateRequest,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
    generator: QuizGenerator = Depends(get_quiz_generator),
):
    summarization = store.get_summarization(summarization_id, user.id)
    summary = source_text(summarization.summary, summarization.input_text)
    if not summary:
        raise ValidationError("No summary content available for quiz generation")

    config = QuizConfig(
        **{**get_settings().get_quiz_config(), **request.model_dump(exclude_none=True)}
    )
    questions = await generator.generate(config, summary)
    if not questions:
        raise QuizGenerationError("No questions were generated")
    if len(questions) != config.num_questions:
        logger.warning(f"Generated {len(questions)} questions instead of {config.num_questions}")

    return QuizGenerateResponse(
        summarization_id=summarization.id,
        config=QuizConfigResponse(**config.model_dump()),
        questions=questions,
    )


@router.post("/quiz/score", response_model=QuizResultsResponse, summary="Score a quiz attempt")
def score_attempt(request: QuizScoreRequest):
    """
    Score a completed attempt.

    Every question must be answered with one of its choices; otherwise the
    response is a 400 carrying the number of unanswered questions.
    """
    answers = {i: c for i, c in request.answers.items() if 0 <= i < len(request.questions)}
    unanswered = len(request.questions) - len(answers)
    if unanswered > 0:
        raise IncompleteQuizError(unanswered)
    for index, choice in answers.items():
        if choice not in request.questions[index].choices:
            raise ValidationError(f"'{choice}' is not a choice for question {index + 1}")

    results = score_quiz(request.questions, answers, request.started_at, request.ended_at)
    return QuizResultsResponse(**asdict(results))


# ========================================
# Summaries
# ========================================


@router.post("/summarize", response_model=SummarizeResponse, summary="Summarize text")
async def summarize(
    request: SummarizeRequest,
    user: User = Depends(get_current_user),
    store: NoteStore = Depends(get_note_store),
    client: TextCompletionClient = Depends(get_completion_client),
):
    """Generate a summary, optionally saving it to one of the user's notes."""
    if request.note_id:
        store.get_note(request.note_id, user.id)

    summary = await generate_summary(request.text, request.options, client=client)
    if not request.note_id:
        return SummarizeResponse(summary=summary)

    saved = store.create_summarization(request.note_id, request.text, summary, user.id)
    return SummarizeResponse(
        summary=summary,
        summarization=SummarizationResponse.model_validate(saved),
    )
