from __future__ import annotations

import os
from typing import Optional

import httpx

from .base import PromptAIClient


class OllamaClient(PromptAIClient):
    """HTTP client for Ollama's generate API.

    Environment:
      - OLLAMA_HOST (default: http://localhost:11434)
      - OLLAMA_MODEL (default: llama3.1:8b-instruct)

    Local models have no web access; claim verdicts come from model knowledge only.
    """

    name = "ollama"

    def __init__(
        self,
        *,
        host: Optional[str] = None,
        model: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        language: str = "English",
    ) -> None:
        super().__init__(language=language)
        self.host = (host or os.environ.get("OLLAMA_HOST", "http://localhost:11434")).rstrip("/")
        self.model = model or os.environ.get("OLLAMA_MODEL", "llama3.1:8b-instruct")
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._owns_http = http is None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _generate(self, prompt: str, *, web_search: bool = False) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": self.temperature},
        }
        resp = await self._http.post(f"{self.host}/api/generate", json=payload)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("Ollama response must be a JSON object")
        # Ollama returns {'response': '...'}
        return str(data.get("response") or "").strip()
