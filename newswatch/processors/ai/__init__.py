"""AI backend selection and clients (Gemini, Ollama, Hugging Face)."""

from .base import AIClient, PromptAIClient
from .factory import create_ai_client

__all__ = ["AIClient", "PromptAIClient", "create_ai_client"]
