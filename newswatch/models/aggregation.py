from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .article import Article


@dataclass(slots=True, frozen=True)
class BranchOutcome:
    """Settled value of one concurrent upstream call."""

    name: str
    items: Tuple[Article, ...]
    used_fallback: bool = False


@dataclass(slots=True, frozen=True)
class AggregationResult:
    """Merged, sorted and truncated items for one request.

    ``items`` is ordered newest first. ``fallback_sources`` lists the branches
    whose live data was replaced by static fallback data.
    """

    items: Tuple[Article, ...] = ()
    used_fallback: bool = False
    error: Optional[str] = None
    fallback_sources: Tuple[str, ...] = field(default=())

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        return {
            "items": [a.to_dict() for a in self.items],
            "usedFallback": self.used_fallback,
            "error": self.error,
            "fallbackSources": list(self.fallback_sources),
        }
