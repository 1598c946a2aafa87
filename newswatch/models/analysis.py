from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(slots=True, frozen=True)
class Summary:
    summary: str


@dataclass(slots=True, frozen=True)
class FakeNewsAssessment:
    is_fake_news: bool
    confidence_score: float
    reason: str


class AnalysisStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class ArticleAnalysis:
    """Outcome of analyzing one article.

    Either field may be None independently; ``error`` is set only when both
    AI calls failed.
    """

    url: str
    summary: Optional[Summary] = None
    fake_news: Optional[FakeNewsAssessment] = None
    error: Optional[str] = None

    @property
    def status(self) -> AnalysisStatus:
        if self.summary is not None and self.fake_news is not None:
            return AnalysisStatus.SUCCESS
        if self.summary is None and self.fake_news is None:
            return AnalysisStatus.FAILED
        return AnalysisStatus.PARTIAL

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status.value,
            "summary": asdict(self.summary) if self.summary else None,
            "fakeNews": asdict(self.fake_news) if self.fake_news else None,
            "error": self.error,
        }


class Verdict(str, Enum):
    LIKELY_TRUE = "LikelyTrue"
    LIKELY_FALSE = "LikelyFalse"
    UNCERTAIN = "Uncertain"


@dataclass(slots=True, frozen=True)
class ClaimVerification:
    verdict: Verdict
    explanation: str
    supporting_evidence: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "verdict": self.verdict.value,
            "explanation": self.explanation,
            "supportingEvidence": list(self.supporting_evidence),
        }


@dataclass(slots=True, frozen=True)
class FactCheckReview:
    publisher_name: str
    publisher_site: str
    url: str
    title: str
    review_date: Optional[str] = None
    textual_rating: Optional[str] = None
    language_code: Optional[str] = None


@dataclass(slots=True, frozen=True)
class FactCheckClaim:
    text: str
    claimant: Optional[str] = None
    claim_date: Optional[str] = None
    reviews: Tuple[FactCheckReview, ...] = ()


@dataclass(slots=True, frozen=True)
class ClaimWorthiness:
    text: str
    score: float
    is_fact_check_worthy: bool


@dataclass(slots=True, frozen=True)
class ClaimContext:
    """Optional enrichment for a claim: worthiness score and published fact checks."""

    worthiness: Optional[ClaimWorthiness] = None
    fact_checks: List[FactCheckClaim] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "worthiness": asdict(self.worthiness) if self.worthiness else None,
            "factChecks": [asdict(c) for c in self.fact_checks],
        }
