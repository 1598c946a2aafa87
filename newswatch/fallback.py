from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from .models import Article, Category


@dataclass(slots=True, frozen=True)
class FallbackEntry:
    """One static article. ``age_hours`` is relative to the moment it is served."""

    title: str
    link: str
    description: str
    source_name: str
    age_hours: float = 0.0
    image_url: Optional[str] = None
    content: str = ""

    def materialize(self, now: datetime, category: Optional[Category] = None) -> Article:
        return Article(
            title=self.title,
            link=self.link,
            description=self.description,
            published_at=now - timedelta(hours=self.age_hours),
            source_name=self.source_name,
            image_url=self.image_url,
            category=category,
            content=self.content,
        )


class FallbackCatalog:
    """Read-only mock datasets substituted when a live source is unavailable.

    Headline mocks are keyed by category, feed mocks by feed source name. Every
    category is present, possibly with no entries.
    """

    __slots__ = ("_headlines", "_feeds")

    def __init__(
        self,
        headlines: Mapping[Category, Tuple[FallbackEntry, ...]],
        feeds: Mapping[str, Tuple[FallbackEntry, ...]],
    ) -> None:
        complete = {c: tuple(headlines.get(c, ())) for c in Category}
        self._headlines = MappingProxyType(complete)
        self._feeds = MappingProxyType({k: tuple(v) for k, v in feeds.items()})

    @property
    def headline_entries(self) -> Mapping[Category, Tuple[FallbackEntry, ...]]:
        return self._headlines

    @property
    def feed_names(self) -> Tuple[str, ...]:
        return tuple(self._feeds)

    def for_category(self, category: Category, *, now: Optional[datetime] = None) -> List[Article]:
        now = now or datetime.now(timezone.utc)
        return [e.materialize(now, category) for e in self._headlines[Category.parse(category)]]

    def for_feed(self, source_name: str, *, now: Optional[datetime] = None) -> List[Article]:
        now = now or datetime.now(timezone.utc)
        return [e.materialize(now) for e in self._feeds.get(source_name, ())]

    def all_headlines(self, *, now: Optional[datetime] = None) -> List[Article]:
        """Every headline mock, flattened in category declaration order."""
        now = now or datetime.now(timezone.utc)
        return [e.materialize(now, c) for c in Category for e in self._headlines[c]]
