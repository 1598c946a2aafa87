"""Multi-source aggregation with per-branch fallback.

Every public operation fans out one branch per source/locale/category, waits
for all of them, substitutes static fallback data for any branch that failed
or came back empty, then merges, sorts newest first and truncates.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

import httpx

from .fallback import FallbackCatalog
from .fetchers import NewsApiClient, RssClient
from .fetchers.http import DEFAULT_HEADERS
from .models import AggregationResult, Article, BranchOutcome, Category, FeedSource
from .utils.config_loader import DEFAULT_FALLBACK_PATH, DEFAULT_FEEDS_PATH, load_fallback_catalog, load_feeds_config
from .utils.logging import get_logger
from .utils.settings import Settings

logger = get_logger("nw.aggregator")

ALL_SOURCES_FAILED = "No news items found from any source"

LATEST_LIMIT = 10
TRENDING_LIMIT = 10
FEED_GROUP_LIMIT = 10
CATEGORY_LIMIT = 5

# (country, page size) pairs queried for each view
LATEST_LOCALES = (("us", 5), ("gb", 3), ("ae", 2))
LATEST_ALTERNATE = ("fr", 10)
CATEGORY_LOCALES = (("us", 3), ("gb", 2))
CATEGORY_ALTERNATE = ("ae", 5)
TRENDING_HEADLINES = ("us", 5)


@dataclass(slots=True, frozen=True)
class Branch:
    """One concurrent upstream call and the static data that replaces it on failure."""

    name: str
    fetch: Callable[[], Awaitable[List[Article]]]
    fallback: Callable[[], List[Article]]


def merge_newest_first(groups: Iterable[Sequence[Article]], limit: int) -> List[Article]:
    """Concatenate in the given order, stable-sort by ``published_at`` descending, truncate."""
    combined = [a for group in groups for a in group]
    # sorted() is stable with reverse=True: equal timestamps keep arrival order
    combined = sorted(combined, key=lambda a: a.published_at, reverse=True)
    return combined[: max(limit, 0)]


def _result(outcomes: Sequence[BranchOutcome], limit: int) -> AggregationResult:
    items = merge_newest_first((o.items for o in outcomes), limit)
    fallback_sources = tuple(o.name for o in outcomes if o.used_fallback)
    return AggregationResult(
        items=tuple(items),
        used_fallback=bool(fallback_sources),
        error=None if items else ALL_SOURCES_FAILED,
        fallback_sources=fallback_sources,
    )


def combine_results(results: Sequence[AggregationResult], limit: int) -> AggregationResult:
    """Merge already-aggregated results, e.g. the same category from two locales."""
    items = merge_newest_first((r.items for r in results), limit)
    fallback_sources = tuple(s for r in results for s in r.fallback_sources)
    return AggregationResult(
        items=tuple(items),
        used_fallback=any(r.used_fallback for r in results),
        error=None if items else ALL_SOURCES_FAILED,
        fallback_sources=fallback_sources,
    )


class Aggregator:
    """Aggregation engine over NewsAPI and RSS feeds.

    The fallback catalog is injected; branches never share state, so a failure
    or timeout in one branch cannot affect another.
    """

    def __init__(
        self,
        news: NewsApiClient,
        rss: RssClient,
        catalog: FallbackCatalog,
        feeds: Sequence[FeedSource] = (),
        *,
        branch_timeout: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.news = news
        self.rss = rss
        self.catalog = catalog
        self.feeds = tuple(feeds)
        self.branch_timeout = branch_timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._owned_http: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Aggregator":
        """Build an engine with live clients sharing one connection pool."""
        settings = settings or Settings()
        catalog = load_fallback_catalog(settings.fallback_path or DEFAULT_FALLBACK_PATH)
        feeds = load_feeds_config(settings.feeds_path or DEFAULT_FEEDS_PATH)
        http = httpx.AsyncClient(headers=DEFAULT_HEADERS, timeout=settings.data_timeout, follow_redirects=True)
        news = NewsApiClient(
            settings.news_api_key,
            base_url=settings.news_api_base_url,
            http=http,
            timeout=settings.data_timeout,
        )
        rss = RssClient(http=http, timeout=settings.data_timeout)
        engine = cls(news, rss, catalog, feeds)
        engine._owned_http = http
        return engine

    async def aclose(self) -> None:
        if self._owned_http is not None:
            await self._owned_http.aclose()
            self._owned_http = None

    async def __aenter__(self) -> "Aggregator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ---------------- Branch construction -----------------
    def _headline_branch(self, country: str, category: Category, page_size: int) -> Branch:
        return Branch(
            name=f"newsapi:{country}/{category.value}",
            fetch=lambda: self.news.fetch_top_headlines(country, category, page_size),
            fallback=lambda: self.catalog.for_category(category, now=self._clock()),
        )

    def _feed_branch(self, feed: FeedSource) -> Branch:
        return Branch(
            name=f"rss:{feed.name}",
            fetch=lambda: self.rss.fetch_feed(feed.url, feed.name),
            fallback=lambda: self.catalog.for_feed(feed.name, now=self._clock()),
        )

    def feeds_in_group(self, group: str) -> List[FeedSource]:
        return [f for f in self.feeds if f.group == group]

    # ---------------- Fan-out / fan-in -----------------
    async def _run_branch(self, branch: Branch) -> BranchOutcome:
        try:
            items = await asyncio.wait_for(branch.fetch(), timeout=self.branch_timeout)
        except asyncio.TimeoutError:
            logger.warning("Branch %s timed out (deadline: %s)", branch.name, self.branch_timeout)
            items = []
        except Exception as exc:  # noqa: BLE001 - a failed branch must not cancel its siblings
            logger.exception("Branch %s failed: %s", branch.name, exc)
            items = []

        if items:
            return BranchOutcome(name=branch.name, items=tuple(items))

        fallback = branch.fallback()
        logger.warning("Branch %s unavailable; serving %d fallback item(s)", branch.name, len(fallback))
        return BranchOutcome(name=branch.name, items=tuple(fallback), used_fallback=True)

    async def settle(self, branches: Sequence[Branch]) -> List[BranchOutcome]:
        """Run all branches concurrently and return their outcomes in declaration order."""
        if not branches:
            return []
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(self._run_branch(b), name=b.name) for b in branches]
        outcomes = [t.result() for t in tasks]
        live = sum(1 for o in outcomes if not o.used_fallback)
        logger.info("Settled %d branch(es): live=%d fallback=%d", len(outcomes), live, len(outcomes) - live)
        return outcomes

    async def aggregate(
        self,
        branches: Sequence[Branch],
        *,
        limit: int,
        alternate: Optional[Branch] = None,
    ) -> AggregationResult:
        """Fan out, substitute fallbacks, merge, sort, truncate.

        When the merged list is empty, ``alternate`` is tried once before the
        result is returned with ``error`` set.
        """
        outcomes = await self.settle(branches)
        result = _result(outcomes, limit)
        if result.items or alternate is None:
            return result

        logger.warning("All %d branch(es) empty; trying alternate source %s", len(branches), alternate.name)
        outcome = await self._run_branch(alternate)
        return _result([*outcomes, outcome], limit)

    # ---------------- NewsAPI operations -----------------
    async def fetch_top_headlines(
        self,
        country: str = "us",
        category: Category | str = Category.GENERAL,
        page_size: int = 10,
    ) -> AggregationResult:
        category = Category.parse(category)
        return await self.aggregate([self._headline_branch(country, category, page_size)], limit=page_size)

    async def fetch_news_by_categories(self, country: str = "us", page_size: int = 5) -> Dict[Category, AggregationResult]:
        """Headlines for every category; each category is an independent branch."""
        categories = list(Category)
        outcomes = await self.settle([self._headline_branch(country, c, page_size) for c in categories])
        by_category = {c: _result([o], page_size) for c, o in zip(categories, outcomes)}
        live = sum(1 for o in outcomes if not o.used_fallback)
        if live == 0:
            logger.warning("All category fetches failed for %s; using fallback data for all categories", country)
        return by_category

    async def search_news(self, query: str, language: str = "en", page_size: int = 10) -> AggregationResult:
        if not query or not query.strip():
            return AggregationResult()
        branch = Branch(
            name=f"newsapi:search/{language}",
            fetch=lambda: self.news.search(query, language, page_size),
            fallback=lambda: self.catalog.all_headlines(now=self._clock())[:page_size],
        )
        return await self.aggregate([branch], limit=page_size)

    # ---------------- RSS operations -----------------
    async def fetch_feed(self, feed: FeedSource) -> AggregationResult:
        return await self.aggregate([self._feed_branch(feed)], limit=FEED_GROUP_LIMIT)

    async def fetch_all_news(self) -> AggregationResult:
        return await self.aggregate([self._feed_branch(f) for f in self.feeds_in_group("news")], limit=FEED_GROUP_LIMIT)

    async def fetch_all_fact_checks(self) -> AggregationResult:
        return await self.aggregate(
            [self._feed_branch(f) for f in self.feeds_in_group("factcheck")], limit=FEED_GROUP_LIMIT
        )

    # ---------------- Views -----------------
    async def latest_news(self) -> AggregationResult:
        """General headlines from several locales, with a further locale as last resort."""
        branches = [self._headline_branch(country, Category.GENERAL, size) for country, size in LATEST_LOCALES]
        country, size = LATEST_ALTERNATE
        return await self.aggregate(
            branches,
            limit=LATEST_LIMIT,
            alternate=self._headline_branch(country, Category.GENERAL, size),
        )

    async def trending_news(self) -> AggregationResult:
        """News-group RSS feeds merged with NewsAPI general headlines."""
        country, size = TRENDING_HEADLINES
        branches = [self._feed_branch(f) for f in self.feeds_in_group("news")]
        branches.append(self._headline_branch(country, Category.GENERAL, size))
        return await self.aggregate(branches, limit=TRENDING_LIMIT)

    async def categorized_news(self) -> Dict[Category, AggregationResult]:
        """Every category from several locales, merged per category. Every category is present."""
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(self.fetch_news_by_categories(country, size)) for country, size in CATEGORY_LOCALES]
        per_locale = [t.result() for t in tasks]
        return {c: combine_results([m[c] for m in per_locale], CATEGORY_LIMIT) for c in Category}

    async def refresh_category(self, category: Category | str) -> AggregationResult:
        category = Category.parse(category)
        branches = [self._headline_branch(country, category, size) for country, size in CATEGORY_LOCALES]
        country, size = CATEGORY_ALTERNATE
        return await self.aggregate(
            branches,
            limit=CATEGORY_LIMIT,
            alternate=self._headline_branch(country, category, size),
        )
