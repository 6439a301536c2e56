"""
Unit tests for the Quiz Lifecycle State Machine.

Tests config validation, generation outcomes, answering, submission,
scoring/grades, retake/reset and the stale-response guard.
"""

import asyncio
import json
from datetime import datetime, timedelta

import pytest

from studybuddy.core.errors import (
    ExternalServiceError,
    IncompleteQuizError,
    QuizStateError,
    ValidationError,
)
from studybuddy.generation.quiz_generator import GeminiQuizGenerator
from studybuddy.study.quiz_engine import (
    QuizConfig,
    QuizPhase,
    QuizQuestion,
    QuizSession,
    grade_for,
    round_half_up,
    score_quiz,
)


# ============================================================================
# Fixtures
# ============================================================================


def make_questions(k):
    return [
        QuizQuestion(
            id=f"q{i}",
            question=f"Question {i}?",
            choices=["A", "B", "C", "D"],
            correct="A",
            explanation="A is right.",
        )
        for i in range(k)
    ]


class StubGenerator:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def generate(self, config, summary):
        self.calls.append((config, summary))
        if self.error is not None:
            raise self.error
        return self.result


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(sample_summary, clock):
    return QuizSession(sample_summary, StubGenerator(make_questions(5)), clock=clock)


async def _activate(session):
    assert await session.generate_quiz() is True
    return session


# ============================================================================
# Scoring
# ============================================================================


class TestGrades:
    @pytest.mark.parametrize(
        "percentage,grade",
        [
            (100, "A+"),
            (90, "A+"),
            (89, "A"),
            (80, "A"),
            (79, "B"),
            (70, "B"),
            (69, "C"),
            (60, "C"),
            (59, "D"),
            (50, "D"),
            (49, "F"),
            (0, "F"),
        ],
    )
    def test_thresholds(self, percentage, grade):
        assert grade_for(percentage) == grade

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(66.66) == 67
        assert round_half_up(12.49) == 12


class TestScoreQuiz:
    @pytest.mark.parametrize("k,m", [(3, 2), (6, 5), (8, 3), (15, 15), (7, 0)])
    def test_percentage(self, k, m):
        questions = make_questions(k)
        answers = {i: "A" if i < m else "B" for i in range(k)}
        results = score_quiz(questions, answers)
        assert results.score == m
        assert results.total == k
        assert results.percentage == round_half_up(100 * m / k)

    def test_half_percent_rounds_up(self):
        # 1/8 = 12.5%
        questions = make_questions(8)
        answers = {i: "A" if i == 0 else "B" for i in range(8)}
        assert score_quiz(questions, answers).percentage == 13

    def test_elapsed_seconds(self):
        start = datetime(2024, 1, 1, 12, 0, 0)
        results = score_quiz(make_questions(3), {}, start, start + timedelta(seconds=41.6))
        assert results.elapsed_seconds == 42

    def test_outcomes(self):
        results = score_quiz(make_questions(2), {0: "A", 1: "C"})
        assert [o.is_correct for o in results.outcomes] == [True, False]
        assert results.outcomes[1].chosen == "C"
        assert results.outcomes[1].correct == "A"


# ============================================================================
# Config
# ============================================================================


class TestConfig:
    def test_defaults(self):
        config = QuizConfig()
        assert (config.num_questions, config.difficulty, config.question_type) == (5, "medium", "mcq")

    @pytest.mark.parametrize("count", [2, 16])
    def test_question_count_bounds(self, session, count):
        with pytest.raises(ValidationError):
            session.update_config(num_questions=count)
        assert session.config.num_questions == 5

    def test_update_config(self, session):
        config = session.update_config(num_questions=10, difficulty="hard", question_type="true-false")
        assert config.num_questions == 10
        assert session.config.question_type == "true-false"

    def test_invalid_difficulty(self, session):
        with pytest.raises(ValidationError):
            session.update_config(difficulty="extreme")


# ============================================================================
# Generation
# ============================================================================


class TestGeneration:
    @pytest.mark.asyncio
    async def test_success_moves_to_active(self, session, clock):
        assert await session.generate_quiz() is True
        assert session.phase == QuizPhase.ACTIVE
        assert len(session.questions) == 5
        assert session.started_at == clock.now
        assert session.answers == {}

    @pytest.mark.asyncio
    async def test_generator_receives_config_and_summary(self, sample_summary, clock):
        generator = StubGenerator(make_questions(3))
        session = QuizSession(sample_summary, generator, clock=clock)
        session.update_config(num_questions=3, difficulty="easy")
        await session.generate_quiz()
        config, summary = generator.calls[0]
        assert config.difficulty == "easy"
        assert summary == sample_summary

    @pytest.mark.asyncio
    async def test_external_failure_enters_error_phase(self, sample_summary):
        session = QuizSession(sample_summary, StubGenerator(error=ExternalServiceError("AI request failed: quota")))
        assert await session.generate_quiz() is False
        assert session.phase == QuizPhase.ERROR
        assert session.error == "AI request failed: quota"

    @pytest.mark.asyncio
    async def test_missing_generator(self, sample_summary):
        session = QuizSession(sample_summary, None)
        await session.generate_quiz()
        assert session.phase == QuizPhase.ERROR
        assert "Gemini API key" in session.error

    @pytest.mark.asyncio
    async def test_empty_summary(self):
        session = QuizSession("   ", StubGenerator(make_questions(3)))
        await session.generate_quiz()
        assert session.error == "No summary content available for quiz generation"

    @pytest.mark.asyncio
    async def test_no_questions(self, sample_summary):
        session = QuizSession(sample_summary, StubGenerator([]))
        await session.generate_quiz()
        assert session.error == "No questions were generated"

    @pytest.mark.asyncio
    async def test_count_mismatch_still_activates(self, sample_summary):
        session = QuizSession(sample_summary, StubGenerator(make_questions(4)))
        assert await session.generate_quiz() is True
        assert len(session.questions) == 4

    @pytest.mark.asyncio
    async def test_retry_after_error(self, sample_summary):
        generator = StubGenerator(error=ExternalServiceError("timeout"))
        session = QuizSession(sample_summary, generator)
        await session.generate_quiz()
        generator.error = None
        generator.result = make_questions(5)
        assert await session.generate_quiz() is True
        assert session.error is None

    @pytest.mark.asyncio
    async def test_config_edit_clears_error(self, sample_summary):
        session = QuizSession(sample_summary, None)
        await session.generate_quiz()
        session.update_config(difficulty="easy")
        assert session.phase == QuizPhase.SETUP
        assert session.error is None

    @pytest.mark.asyncio
    async def test_concurrent_generate_rejected(self, sample_summary):
        gate = asyncio.Event()

        class SlowGenerator:
            async def generate(self, config, summary):
                await gate.wait()
                return make_questions(5)

        session = QuizSession(sample_summary, SlowGenerator())
        task = asyncio.create_task(session.generate_quiz())
        await asyncio.sleep(0)
        assert session.is_generating
        with pytest.raises(QuizStateError):
            await session.generate_quiz()
        gate.set()
        assert await task is True

    @pytest.mark.asyncio
    async def test_stale_response_after_reset_discarded(self, sample_summary):
        gate = asyncio.Event()

        class SlowGenerator:
            async def generate(self, config, summary):
                await gate.wait()
                return make_questions(5)

        session = QuizSession(sample_summary, SlowGenerator())
        task = asyncio.create_task(session.generate_quiz())
        await asyncio.sleep(0)
        session.reset_quiz()
        gate.set()
        assert await task is False
        assert session.phase == QuizPhase.SETUP
        assert session.questions == []

    @pytest.mark.asyncio
    async def test_malformed_reply_allows_retry(self, sample_summary, make_client, make_quiz_payload):
        payload = make_quiz_payload(5)
        payload["questions"][0]["concept"] = ["a", "b"]
        client = make_client(json.dumps(payload), json.dumps(make_quiz_payload(5)))
        session = QuizSession(sample_summary, GeminiQuizGenerator(client=client))

        assert await session.generate_quiz() is False
        assert session.phase == QuizPhase.ERROR
        assert "Invalid question format at index 0" in session.error

        assert await session.generate_quiz() is True
        assert session.phase == QuizPhase.ACTIVE

    @pytest.mark.asyncio
    async def test_unexpected_failure_enters_error_phase(self, sample_summary):
        generator = StubGenerator(error=RuntimeError("boom"))
        session = QuizSession(sample_summary, generator)
        assert await session.generate_quiz() is False
        assert session.phase == QuizPhase.ERROR
        assert session.error == "Failed to generate quiz. Please try again."

        generator.error = None
        generator.result = make_questions(5)
        assert await session.generate_quiz() is True

    @pytest.mark.asyncio
    async def test_cancelled_generation_does_not_lock_session(self, sample_summary):
        gate = asyncio.Event()

        class SlowGenerator:
            async def generate(self, config, summary):
                await gate.wait()
                return make_questions(5)

        session = QuizSession(sample_summary, SlowGenerator())
        task = asyncio.create_task(session.generate_quiz())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not session.is_generating
        assert session.phase == QuizPhase.ERROR

    @pytest.mark.asyncio
    async def test_stale_response_after_close_discarded(self, sample_summary):
        gate = asyncio.Event()

        class SlowGenerator:
            async def generate(self, config, summary):
                await gate.wait()
                raise ExternalServiceError("late failure")

        session = QuizSession(sample_summary, SlowGenerator())
        task = asyncio.create_task(session.generate_quiz())
        await asyncio.sleep(0)
        session.close()
        gate.set()
        assert await task is False
        assert session.error is None


# ============================================================================
# Answering and results
# ============================================================================


class TestAnswering:
    @pytest.mark.asyncio
    async def test_reselect_overwrites(self, session):
        await _activate(session)
        session.answer(0, "B")
        session.answer(0, "A")
        assert session.answers[0] == "A"

    @pytest.mark.asyncio
    async def test_invalid_choice_rejected(self, session):
        await _activate(session)
        with pytest.raises(ValidationError):
            session.answer(0, "Z")
        with pytest.raises(ValidationError):
            session.answer(9, "A")

    def test_answer_before_generation_rejected(self, session):
        with pytest.raises(QuizStateError):
            session.answer(0, "A")

    @pytest.mark.asyncio
    async def test_progress(self, session):
        await _activate(session)
        session.answer(0, "A")
        session.answer(1, "A")
        assert session.progress == pytest.approx(40.0)

    @pytest.mark.asyncio
    async def test_submit_incomplete_reports_unanswered(self, session):
        await _activate(session)
        session.answer(0, "A")
        session.answer(3, "B")
        with pytest.raises(IncompleteQuizError) as exc_info:
            session.submit_quiz()
        assert exc_info.value.unanswered == 3
        assert exc_info.value.message == "Please answer all questions. 3 remaining."
        assert session.phase == QuizPhase.ACTIVE
        assert session.results is None

    @pytest.mark.asyncio
    async def test_submit_complete(self, session, clock):
        await _activate(session)
        for i in range(5):
            session.answer(i, "A" if i < 4 else "B")
        clock.advance(30)
        results = session.submit_quiz()
        assert session.phase == QuizPhase.RESULTS
        assert results.score == 4
        assert results.percentage == 80
        assert results.grade == "A"
        assert results.elapsed_seconds == 30


class TestRetakeAndReset:
    async def _finish(self, session):
        await _activate(session)
        for i in range(len(session.questions)):
            session.answer(i, "A")
        session.submit_quiz()

    @pytest.mark.asyncio
    async def test_retake_keeps_questions(self, session, clock):
        await self._finish(session)
        questions = list(session.questions)
        clock.advance(60)
        session.retake_quiz()
        assert session.phase == QuizPhase.ACTIVE
        assert session.questions == questions
        assert session.answers == {}
        assert session.started_at == clock.now

    @pytest.mark.asyncio
    async def test_reset_restores_defaults(self, session):
        session.update_config(num_questions=12, difficulty="hard")
        await self._finish(session)
        session.reset_quiz()
        assert session.phase == QuizPhase.SETUP
        assert session.config == QuizConfig()
        assert session.questions == []
        assert session.started_at is None

    def test_retake_requires_results(self, session):
        with pytest.raises(QuizStateError):
            session.retake_quiz()

    @pytest.mark.asyncio
    async def test_closed_session_rejects_operations(self, session):
        session.close()
        with pytest.raises(QuizStateError):
            await session.generate_quiz()
