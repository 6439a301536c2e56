"""External collaborators (AI text completion)."""

from .gemini_client import GeminiClient, TextCompletionClient

__all__ = ["GeminiClient", "TextCompletionClient"]
