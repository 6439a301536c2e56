"""
Configuration settings for the Study Buddy service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///./studybuddy.db",
        description="SQLAlchemy connection string for notes and summarizations",
    )

    # ========================================
    # AI (Gemini)
    # ========================================
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key for summaries and quiz generation",
    )
    quiz_model: str = Field(
        default="gemini-1.5-pro",
        description="Model used to generate quizzes",
    )
    summary_model: str = Field(
        default="gemini-2.0-flash",
        description="Model used to summarize input text",
    )
    ai_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for a single AI completion round trip",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )

    # ========================================
    # Quiz
    # ========================================
    quiz_default_questions: int = Field(
        default=5,
        ge=3,
        le=15,
        description="Default number of questions in a new quiz",
    )
    quiz_default_difficulty: Literal["easy", "medium", "hard"] = Field(
        default="medium",
        description="Default quiz difficulty",
    )
    quiz_default_type: Literal["mcq", "true-false"] = Field(
        default="mcq",
        description="Default quiz question type",
    )

    # ========================================
    # Flashcards
    # ========================================
    flashcard_default_interval_ms: int = Field(
        default=3000,
        description="Autoplay interval before the user picks a speed",
    )

    def has_ai_configured(self) -> bool:
        """Check if the Gemini API is configured."""
        return bool(self.gemini_api_key)

    def get_quiz_config(self) -> dict[str, Any]:
        """Get quiz defaults as a dictionary."""
        return {
            "num_questions": self.quiz_default_questions,
            "difficulty": self.quiz_default_difficulty,
            "question_type": self.quiz_default_type,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
