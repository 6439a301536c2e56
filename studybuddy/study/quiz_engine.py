"""
Quiz Lifecycle State Machine.

Drives one quiz attempt cycle over a summary:

    setup -> generating -> active -> results
      ^          |                     |
      |          v                     | retake (same questions)
      +------- error                   v
      +--------------- reset ------- active

Question generation is delegated to an injected QuizGenerator, a stateless
collaborator called once per generate_quiz(). A missing API key or a bad
response surfaces as the error phase with a readable message; the user can
edit the config and try again. Nothing is retried automatically.

Scoring is a pure function (score_quiz) so the HTTP layer can score an
attempt without holding a session.
"""
from __future__ import annotations

import asyncio
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Protocol

from loguru import logger
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from studybuddy.core.errors import (
    IncompleteQuizError,
    QuizStateError,
    StudyBuddyError,
    ValidationError,
)

Difficulty = Literal["easy", "medium", "hard"]
QuestionType = Literal["mcq", "true-false"]

# Lower bound (inclusive) -> letter grade, checked top down
GRADE_THRESHOLDS: list[tuple[int, str]] = [
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
    (50, "D"),
]
FAILING_GRADE = "F"


class QuizConfig(BaseModel):
    """User-editable quiz configuration."""

    num_questions: int = Field(5, ge=3, le=15, description="Number of questions (3-15)")
    difficulty: Difficulty = Field("medium", description="easy, medium or hard")
    question_type: QuestionType = Field("mcq", description="mcq or true-false")


class QuizQuestion(BaseModel):
    """A generated question; ``correct`` is always one of ``choices``."""

    id: str
    question: str
    choices: list[str]
    correct: str
    explanation: str
    difficulty: str | None = None
    concept: str | None = None


class QuizPhase(str, Enum):
    SETUP = "setup"
    GENERATING = "generating"
    ACTIVE = "active"
    RESULTS = "results"
    ERROR = "error"


class QuizGenerator(Protocol):
    async def generate(self, config: QuizConfig, summary: str) -> list[QuizQuestion]:
        ...


@dataclass
class QuestionOutcome:
    index: int
    question: str
    chosen: str | None
    correct: str
    is_correct: bool
    explanation: str
    concept: str | None = None


@dataclass
class QuizResults:
    score: int
    total: int
    percentage: int
    grade: str
    elapsed_seconds: int
    outcomes: list[QuestionOutcome] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grade_for(percentage: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return grade
    return FAILING_GRADE


def score_quiz(
    questions: Sequence[QuizQuestion],
    answers: Mapping[int, str],
    started_at: datetime | None = None,
    ended_at: datetime | None = None,
) -> QuizResults:
    """
    Score an attempt.

    Args:
        questions: The question set
        answers: Question index -> chosen choice
        started_at: When the attempt started
        ended_at: When it was submitted

    Returns:
        QuizResults with score, rounded percentage, letter grade and elapsed seconds
    """
    outcomes = []
    for index, q in enumerate(questions):
        chosen = answers.get(index)
        outcomes.append(
            QuestionOutcome(
                index=index,
                question=q.question,
                chosen=chosen,
                correct=q.correct,
                is_correct=chosen == q.correct,
                explanation=q.explanation,
                concept=q.concept,
            )
        )

    total = len(questions)
    score = sum(1 for o in outcomes if o.is_correct)
    percentage = round_half_up(100 * score / total) if total else 0
    elapsed = 0
    if started_at is not None and ended_at is not None:
        elapsed = round_half_up((ended_at - started_at).total_seconds())

    return QuizResults(
        score=score,
        total=total,
        percentage=percentage,
        grade=grade_for(percentage),
        elapsed_seconds=elapsed,
        outcomes=outcomes,
    )


class QuizSession:
    """
    One quiz over one summary.

    A generation response that arrives after reset_quiz() or close() is
    discarded, so a slow AI call can never overwrite a view the user has
    already left.
    """

    def __init__(
        self,
        summary: str,
        generator: QuizGenerator | None,
        default_config: QuizConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.summary = summary or ""
        self.generator = generator
        self.default_config = default_config or QuizConfig()
        self.clock = clock

        self.phase = QuizPhase.SETUP
        self.config = self.default_config.model_copy()
        self.questions: list[QuizQuestion] = []
        self.answers: dict[int, str] = {}
        self.started_at: datetime | None = None
        self.ended_at: datetime | None = None
        self.error: str | None = None
        self.closed = False
        self._epoch = 0

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def update_config(self, **changes) -> QuizConfig:
        self._require(QuizPhase.SETUP, QuizPhase.ERROR)
        try:
            config = QuizConfig.model_validate({**self.config.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid quiz configuration: {e.errors()[0]['msg']}") from e
        self.config = config
        self.dismiss_error()
        return config

    def dismiss_error(self) -> None:
        if self.phase == QuizPhase.ERROR:
            self.phase = QuizPhase.SETUP
        self.error = None

    @property
    def is_generating(self) -> bool:
        """While True the generate control must stay disabled."""
        return self.phase == QuizPhase.GENERATING

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_quiz(self) -> bool:
        """
        Ask the generator for a fresh question set.

        Returns:
            True if the session moved to the active phase
        """
        if self.is_generating:
            raise QuizStateError("Quiz generation already in progress")
        self._require(QuizPhase.SETUP, QuizPhase.ERROR)

        if not self.summary.strip():
            return self._fail("No summary content available for quiz generation")
        if self.generator is None:
            return self._fail("Quiz generator not initialized. Please check your Gemini API key.")

        self.phase = QuizPhase.GENERATING
        self.error = None
        epoch = self._epoch
        config = self.config

        try:
            questions = await self.generator.generate(config, self.summary)
        except StudyBuddyError as e:
            if self._is_stale(epoch):
                return False
            logger.error(f"Quiz generation error: {e.message}")
            return self._fail(e.message or "Failed to generate quiz. Please try again.")
        except Exception as e:
            if self._is_stale(epoch):
                return False
            logger.exception(f"Unexpected quiz generation failure: {e}")
            return self._fail("Failed to generate quiz. Please try again.")
        except asyncio.CancelledError:
            if not self._is_stale(epoch):
                self._fail("Quiz generation was interrupted")
            raise

        if self._is_stale(epoch):
            return False
        if not questions:
            return self._fail("No questions were generated")
        if len(questions) != config.num_questions:
            logger.warning(
                f"Generated {len(questions)} questions instead of {config.num_questions}"
            )

        self.questions = list(questions)
        self.answers = {}
        self.started_at = self.clock()
        self.ended_at = None
        self.phase = QuizPhase.ACTIVE
        logger.info(f"Generated {len(questions)} {config.difficulty} questions")
        return True

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    def answer(self, index: int, choice: str) -> None:
        """Record (or overwrite) the choice for question ``index``."""
        self._require(QuizPhase.ACTIVE)
        if not 0 <= index < len(self.questions):
            raise ValidationError(f"No question at index {index}")
        if choice not in self.questions[index].choices:
            raise ValidationError(f"'{choice}' is not a choice for question {index + 1}")
        self.answers[index] = choice

    @property
    def unanswered_count(self) -> int:
        return len(self.questions) - len(self.answers)

    @property
    def progress(self) -> float:
        """Answered percentage, 0-100."""
        if not self.questions:
            return 0.0
        return len(self.answers) / len(self.questions) * 100

    def submit_quiz(self) -> QuizResults:
        self._require(QuizPhase.ACTIVE)
        unanswered = self.unanswered_count
        if unanswered > 0:
            logger.warning(f"Quiz submitted with {unanswered} unanswered question(s)")
            raise IncompleteQuizError(unanswered)
        self.ended_at = self.clock()
        self.phase = QuizPhase.RESULTS
        results = self.results
        logger.info(f"Quiz submitted: {results.score}/{results.total} ({results.grade})")
        return results

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def results(self) -> QuizResults | None:
        if self.phase != QuizPhase.RESULTS:
            return None
        return score_quiz(self.questions, self.answers, self.started_at, self.ended_at)

    def retake_quiz(self) -> None:
        """Answer the same questions again."""
        self._require(QuizPhase.RESULTS)
        self.answers = {}
        self.started_at = self.clock()
        self.ended_at = None
        self.phase = QuizPhase.ACTIVE

    def reset_quiz(self) -> None:
        """Back to setup with default config; any in-flight generation is discarded."""
        self._epoch += 1
        self.config = self.default_config.model_copy()
        self.questions = []
        self.answers = {}
        self.started_at = None
        self.ended_at = None
        self.error = None
        self.phase = QuizPhase.SETUP

    def close(self) -> None:
        """The view went away; ignore whatever is still in flight."""
        self._epoch += 1
        self.closed = True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_stale(self, epoch: int) -> bool:
        if self.closed or epoch != self._epoch:
            logger.warning("Discarding quiz generation result for a closed or reset session")
            return True
        return False

    def _fail(self, message: str) -> bool:
        self.error = message
        self.phase = QuizPhase.ERROR
        return False

    def _require(self, *phases: QuizPhase) -> None:
        if self.closed:
            raise QuizStateError("Quiz session is closed")
        if self.phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise QuizStateError(f"Not allowed in phase '{self.phase.value}' (expected {allowed})")
