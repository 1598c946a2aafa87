from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...models import ClaimVerification, FakeNewsAssessment, Summary
from . import prompts
from .parsing import parse_fake_news_response, parse_summary_response, parse_verification_response


class AIClient(ABC):
    """Abstract AI backend for article analysis and claim verification.

    Methods raise on any failure (``AIUnavailable``, ``httpx.HTTPError`` or
    ``ValueError`` for unusable output); callers decide how to degrade.
    """

    name = "ai"

    @abstractmethod
    async def summarize_article(self, url: str, content: Optional[str] = None) -> Summary:
        """Return a concise summary of the article at ``url``."""

    @abstractmethod
    async def detect_fake_news(self, url: str, content: str) -> FakeNewsAssessment:
        """Assess whether the article likely contains misinformation."""

    @abstractmethod
    async def verify_claim(self, claim_text: str) -> ClaimVerification:
        """Return a verdict with explanation and supporting evidence."""

    async def aclose(self) -> None:
        return None


class PromptAIClient(AIClient):
    """Backends driven by a single text-generation call returning JSON."""

    def __init__(self, *, language: str = "English", temperature: float = 0.2) -> None:
        self.language = language
        self.temperature = temperature

    @abstractmethod
    async def _generate(self, prompt: str, *, web_search: bool = False) -> str:
        """Run one generation and return the raw model text."""

    async def summarize_article(self, url: str, content: Optional[str] = None) -> Summary:
        raw = await self._generate(prompts.summarize_prompt(url, content, language=self.language))
        return parse_summary_response(raw)

    async def detect_fake_news(self, url: str, content: str) -> FakeNewsAssessment:
        raw = await self._generate(prompts.fake_news_prompt(url, content, language=self.language))
        return parse_fake_news_response(raw)

    async def verify_claim(self, claim_text: str) -> ClaimVerification:
        raw = await self._generate(prompts.verify_claim_prompt(claim_text, language=self.language), web_search=True)
        return parse_verification_response(raw)
