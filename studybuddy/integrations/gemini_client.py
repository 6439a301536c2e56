"""
Gemini text-completion client.

The only contract the rest of Study Buddy relies on is
``await client.complete(prompt) -> str``. Anything that goes wrong on the
way (missing key, network, timeout, quota, blocked or empty response)
comes back as an ExternalServiceError, never as a provider exception.

The API key is checked when a completion is requested, not when the
client is built, so a misconfigured deployment still starts and reports
the problem on the action that needs it.
"""
from __future__ import annotations

import asyncio
from typing import Any, Protocol

from loguru import logger

from config import get_settings
from studybuddy.core.errors import ConfigurationError, ExternalServiceError


class TextCompletionClient(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


class GeminiClient:
    """Async wrapper around a google-generativeai GenerativeModel."""

    def __init__(
        self,
        model_name: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        generation_config: dict[str, Any] | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.gemini_api_key
        self.model_name = model_name or settings.summary_model
        self.timeout = timeout or settings.ai_timeout_seconds
        self.generation_config = generation_config or {"temperature": 0.3}
        self._model = None

    @property
    def model(self):
        """Lazy-load Gemini model."""
        if self._model is None:
            if not self.api_key:
                raise ConfigurationError(
                    "Gemini API key missing. Set GEMINI_API_KEY to enable AI features."
                )
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(model_name=self.model_name)
        return self._model

    async def complete(self, prompt: str) -> str:
        model = self.model
        try:
            response = await asyncio.wait_for(
                model.generate_content_async(prompt, generation_config=self.generation_config),
                timeout=self.timeout,
            )
            text = response.text
        except asyncio.TimeoutError as e:
            logger.error(f"Gemini request timed out after {self.timeout}s ({self.model_name})")
            raise ExternalServiceError(f"AI request timed out after {self.timeout:.0f}s") from e
        except Exception as e:
            logger.error(f"Gemini request failed ({self.model_name}): {e}")
            raise ExternalServiceError(f"AI request failed: {e}") from e

        if not text or not text.strip():
            raise ExternalServiceError("AI returned an empty response")
        return text
