"""Summary generation for user input text."""
from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel

from config import get_settings
from studybuddy.core.errors import ExternalServiceError, ValidationError
from studybuddy.integrations.gemini_client import GeminiClient, TextCompletionClient

from .prompts import get_summary_prompt


class SummaryOptions(BaseModel):
    """How the summary should look."""

    length: Literal["short", "medium", "long"] = "medium"
    format: Literal["paragraph", "bullet", "numbered"] = "paragraph"
    focus: Literal["keyPoints", "detailed", "actionItems"] = "keyPoints"
    strategy: Literal["fast", "balanced", "thorough"] = "balanced"
    priority: Literal["speed", "accuracy", "creativity"] = "accuracy"


def build_summary_prompt(text: str, options: SummaryOptions | None = None) -> str:
    options = options or SummaryOptions()
    return get_summary_prompt(text, **options.model_dump())


async def generate_summary(
    text: str,
    options: SummaryOptions | None = None,
    client: TextCompletionClient | None = None,
) -> str:
    """
    Summarize input text with the AI collaborator.

    Raises:
        ValidationError: Blank input
        ExternalServiceError: AI failure or empty summary
    """
    if not (text or "").strip():
        raise ValidationError("Please enter some text to summarize")

    client = client or GeminiClient(model_name=get_settings().summary_model)
    summary = (await client.complete(build_summary_prompt(text, options))).strip()
    if not summary:
        raise ExternalServiceError("AI returned an empty summary")
    logger.info(f"Generated summary ({len(summary)} chars from {len(text)} chars of input)")
    return summary
