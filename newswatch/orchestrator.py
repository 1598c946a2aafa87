from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar
from urllib.parse import urlparse

from .errors import ValidationError, VerificationFailed
from .fetchers import ClaimBusterClient, FactCheckClient, PageClient
from .models import ArticleAnalysis, ClaimContext, ClaimVerification, FakeNewsAssessment, Summary
from .processors.ai import AIClient, create_ai_client
from .utils.logging import get_logger
from .utils.settings import Settings

logger = get_logger("nw.orchestrator")

T = TypeVar("T")

DEFAULT_CLAIM_MIN_LENGTH = 10
ANALYSIS_FAILED = "Both summarization and misinformation detection failed"


def validate_article_url(url: str) -> str:
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid article URL: {url!r}")
    return candidate


def validate_claim_text(text: str, *, min_length: int = DEFAULT_CLAIM_MIN_LENGTH) -> str:
    candidate = (text or "").strip()
    if len(candidate) < min_length:
        raise ValidationError(f"Claim text must be at least {min_length} characters")
    return candidate


def placeholder_content(url: str) -> str:
    return f"Content for {url}"


class Orchestrator:
    """Runs AI analysis for articles and claims.

    Article analysis tolerates either AI call failing. Claim verification has
    no fallback: any failure raises ``VerificationFailed``.
    """

    def __init__(
        self,
        ai: AIClient,
        *,
        pages: Optional[PageClient] = None,
        fact_checks: Optional[FactCheckClient] = None,
        claimbuster: Optional[ClaimBusterClient] = None,
        ai_timeout: float = 30.0,
        claim_min_length: int = DEFAULT_CLAIM_MIN_LENGTH,
    ) -> None:
        self.ai = ai
        self.pages = pages
        self.fact_checks = fact_checks
        self.claimbuster = claimbuster
        self.ai_timeout = ai_timeout
        self.claim_min_length = claim_min_length

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Orchestrator":
        settings = settings or Settings()
        return cls(
            create_ai_client(backend=settings.processing_backend, timeout=settings.ai_timeout),
            pages=PageClient(timeout=settings.data_timeout),
            fact_checks=FactCheckClient(settings.fact_check_api_key, timeout=settings.data_timeout),
            claimbuster=ClaimBusterClient(settings.claimbuster_api_key, timeout=settings.data_timeout),
            ai_timeout=settings.ai_timeout,
            claim_min_length=settings.claim_min_length,
        )

    async def aclose(self) -> None:
        await self.ai.aclose()
        for client in (self.pages, self.fact_checks, self.claimbuster):
            if client is not None:
                await client.aclose()

    async def __aenter__(self) -> "Orchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _ai_call(self, label: str, call: Awaitable[T]) -> Optional[T]:
        """One bounded AI call; any failure is logged and becomes None."""
        try:
            return await asyncio.wait_for(call, timeout=self.ai_timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs", label, self.ai_timeout)
        except Exception as exc:  # noqa: BLE001 - an AI failure only ever empties its own field
            logger.warning("%s failed: %s", label, exc)
        return None

    async def _article_content(self, url: str) -> str:
        if self.pages is None:
            return placeholder_content(url)
        text = await self.pages.fetch_article_text(url)
        return text or placeholder_content(url)

    async def analyze_article(self, url: str) -> ArticleAnalysis:
        """Summarize and assess an article concurrently.

        Raises ``ValidationError`` for a malformed URL; upstream failures only
        ever null out the affected field.
        """
        url = validate_article_url(url)
        content = await self._article_content(url)

        async with asyncio.TaskGroup() as tg:
            summary_task = tg.create_task(self._ai_call("Summarization", self.ai.summarize_article(url, content)))
            fake_task = tg.create_task(self._ai_call("Fake news detection", self.ai.detect_fake_news(url, content)))

        summary: Optional[Summary] = summary_task.result()
        fake_news: Optional[FakeNewsAssessment] = fake_task.result()
        error = ANALYSIS_FAILED if summary is None and fake_news is None else None
        analysis = ArticleAnalysis(url=url, summary=summary, fake_news=fake_news, error=error)
        logger.info("Analyzed %s: status=%s", url, analysis.status.value)
        return analysis

    async def verify_claim(self, text: str) -> ClaimVerification:
        claim = validate_claim_text(text, min_length=self.claim_min_length)
        result = await self._ai_call("Claim verification", self.ai.verify_claim(claim))
        if result is None:
            raise VerificationFailed("The model could not produce a verification for this claim")
        logger.info("Verified claim: verdict=%s evidence=%d", result.verdict.value, len(result.supporting_evidence))
        return result

    async def enrich_claim(self, text: str, language: str = "en") -> ClaimContext:
        """Claim-worthiness score and published fact checks, each optional."""
        claim = validate_claim_text(text, min_length=self.claim_min_length)

        async def _worthiness():
            return await self.claimbuster.score(claim) if self.claimbuster else None

        async def _fact_checks():
            return await self.fact_checks.claims_for(claim, language) if self.fact_checks else []

        async with asyncio.TaskGroup() as tg:
            worthiness_task = tg.create_task(_worthiness())
            checks_task = tg.create_task(_fact_checks())
        return ClaimContext(worthiness=worthiness_task.result(), fact_checks=checks_task.result())
