"""Typed models used across the application."""

from .article import Article, Category, CATEGORY_LABELS
from .aggregation import AggregationResult, BranchOutcome
from .analysis import (
    AnalysisStatus,
    ArticleAnalysis,
    ClaimContext,
    ClaimVerification,
    ClaimWorthiness,
    FactCheckClaim,
    FactCheckReview,
    FakeNewsAssessment,
    Summary,
    Verdict,
)
from .source import FeedSource, FeedGroup

__all__ = [
    "Article",
    "Category",
    "CATEGORY_LABELS",
    "AggregationResult",
    "BranchOutcome",
    "AnalysisStatus",
    "ArticleAnalysis",
    "ClaimContext",
    "ClaimVerification",
    "ClaimWorthiness",
    "FactCheckClaim",
    "FactCheckReview",
    "FakeNewsAssessment",
    "Summary",
    "Verdict",
    "FeedSource",
    "FeedGroup",
]
