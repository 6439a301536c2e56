"""
Quiz generation over a summary.

The AI collaborator is asked for a JSON object with a ``questions`` list.
The reply is treated as untrusted text: the first {...} block is
extracted, parsed and validated question by question. Any defect fails
the whole set with a QuizGenerationError naming the offending index;
partial sets are never returned.
"""
from __future__ import annotations

import json
import re
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from config import get_settings
from studybuddy.core.errors import QuizGenerationError
from studybuddy.integrations.gemini_client import GeminiClient, TextCompletionClient
from studybuddy.study.quiz_engine import QuizConfig, QuizQuestion

from .prompts import get_quiz_prompt

JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
REQUIRED_FIELDS = ("id", "question", "choices", "correct", "explanation")
TRUE_FALSE_CHOICES = ["True", "False"]


def _invalid(reason: str) -> QuizGenerationError:
    return QuizGenerationError(f"Quiz generation failed: {reason}")


def build_quiz_prompt(config: QuizConfig, summary: str) -> str:
    return get_quiz_prompt(
        summary=summary,
        num_questions=config.num_questions,
            difficulty=config.difficulty,
        question_type=config.question_type,
    )


def _validate_question(index: int, raw: Any, config: QuizConfig | None) -> QuizQuestion:
    if (
        not isinstance(raw, dict)
        or raw.get("choices") is None
        or any(not raw.get(key) for key in REQUIRED_FIELDS if key != "choices")
    ):
        raise _invalid(f"Invalid question format at index {index}")

    choices = raw["choices"]
    if not isinstance(choices, list) or not choices or not all(isinstance(c, str) for c in choices):
        raise _invalid(f"Invalid choices format at index {index}")
    if raw["correct"] not in choices:
        raise _invalid(f"Correct answer not found in choices at index {index}")
    if config is not None and config.question_type == "true-false" and choices != TRUE_FALSE_CHOICES:
        raise _invalid(f"True/false choices must be exactly {TRUE_FALSE_CHOICES} at index {index}")

    try:
        return QuizQuestion(
            id=str(raw["id"]),
            question=str(raw["question"]),
            choices=choices,
            correct=raw["correct"],
            explanation=str(raw["explanation"]),
            difficulty=raw.get("difficulty") or (config.difficulty if config else None),
            concept=raw.get("concept"),
        )
    except PydanticValidationError as e:
        raise _invalid(f"Invalid question format at index {index}") from e


def parse_quiz_response(text: str, config: QuizConfig | None = None) -> list[QuizQuestion]:
    """
    Extract and validate the question set from a model reply.

    Args:
        text: Raw completion text (may wrap the JSON in prose or code fences)
        config: Config the quiz was generated for; enables the true/false choice check

    Returns:
        Validated questions in reply order

    Raises:
        QuizGenerationError: No JSON, unparseable JSON, or an invalid question
    """
    match = JSON_OBJECT.search(text or "")
    if not match:
        raise _invalid("No valid JSON found in response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise _invalid(f"Response JSON could not be parsed ({e.msg})") from e

    questions = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(questions, list):
        raise _invalid("Invalid response format: missing questions array")

    return [_validate_question(i, q, config) for i, q in enumerate(questions)]


class GeminiQuizGenerator:
    """
    Stateless quiz generator: config + summary in, questions out.

    Holds no per-quiz state, so one instance can serve any number of
    sessions and requests.
    """

    def __init__(self, client: TextCompletionClient | None = None):
        self.client = client or GeminiClient(model_name=get_settings().quiz_model)

    async def generate(self, config: QuizConfig, summary: str) -> list[QuizQuestion]:
        prompt = build_quiz_prompt(config, summary)
        logger.debug(
            f"Requesting {config.num_questions} {config.difficulty} {config.question_type} questions"
        )
        text = await self.client.complete(prompt)
        return parse_quiz_response(text, config)
