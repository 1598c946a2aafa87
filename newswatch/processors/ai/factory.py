from __future__ import annotations

import os
from typing import Optional

from .base import AIClient


def create_ai_client(*, backend: Optional[str] = None, timeout: float = 30.0) -> AIClient:
    """Create an AI client based on PROCESSING_BACKEND env or explicit value.

    Supported values: "gemini" (default), "ollama" or "huggingface".
    Language of generated text comes from AI_RESPONSE_LANGUAGE (default English).
    """
    selected = (backend or os.environ.get("PROCESSING_BACKEND", "gemini")).lower()
    language = os.environ.get("AI_RESPONSE_LANGUAGE", "English")

    if selected == "gemini":
        from .gemini import GeminiClient  # lazy import

        return GeminiClient(timeout=timeout, language=language)
    if selected == "ollama":
        from .ollama import OllamaClient  # lazy import

        return OllamaClient(timeout=timeout, language=language)
    if selected == "huggingface":
        from .huggingface import HuggingFaceClient  # lazy import

        return HuggingFaceClient(timeout=timeout)

    raise ValueError(
        f"Unsupported PROCESSING_BACKEND '{selected}'. Use 'gemini', 'ollama' or 'huggingface'."
    )
