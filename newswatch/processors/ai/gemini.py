from __future__ import annotations

import os
from typing import Optional

import httpx

from ...errors import AIUnavailable
from .base import PromptAIClient


class GeminiClient(PromptAIClient):
    """HTTP client for Gemini via Google AI Studio API.

    Environment:
      - GOOGLE_API_KEY (required for live calls; without it every call fails)
      - GEMINI_MODEL (default: gemini-2.0-flash)

    Claim verification enables the Google Search tool. Gemini rejects a JSON
    response MIME type when tools are enabled, so that call relies on the
    prompt and the tolerant JSON extraction in ``parsing``.
    """

    name = "gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        language: str = "English",
    ) -> None:
        super().__init__(language=language)
        self.api_key = api_key if api_key is not None else os.environ.get("GOOGLE_API_KEY", "")
        self.model = model or os.environ.get("GEMINI_MODEL", "gemini-2.0-flash")
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._owns_http = http is None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _generate(self, prompt: str, *, web_search: bool = False) -> str:
        if not self.api_key:
            raise AIUnavailable(self.name, "GOOGLE_API_KEY is not set")

        payload: dict = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.temperature},
        }
        if web_search:
            payload["tools"] = [{"google_search": {}}]
        else:
            payload["generationConfig"]["responseMimeType"] = "application/json"

        resp = await self._http.post(
            f"{self.BASE_URL}/{self.model}:generateContent",
            json=payload,
            headers={"x-goog-api-key": self.api_key},
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("Gemini response must be a JSON object")
        # Extract text from the first candidate
        candidates = data.get("candidates") or []
        if not candidates:
            raise AIUnavailable(self.name, "no candidates in response")
        parts = candidates[0].get("content", {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts)
        return text.strip()
