"""AI-backed generation: summaries and quizzes."""

from .quiz_generator import GeminiQuizGenerator, build_quiz_prompt, parse_quiz_response
from .summarizer import SummaryOptions, build_summary_prompt, generate_summary

__all__ = [
    "GeminiQuizGenerator",
    "build_quiz_prompt",
    "parse_quiz_response",
    "SummaryOptions",
    "build_summary_prompt",
    "generate_summary",
]
