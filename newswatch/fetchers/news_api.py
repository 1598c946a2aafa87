from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

import httpx

from ..errors import UpstreamUnavailable
from ..models import Article, Category
from ..processors.normalize import normalize_news_api_article
from ..utils.logging import get_logger
from .http import AsyncHTTPClient, guarded

logger = get_logger("nw.fetchers.news_api")

NEWS_API_BASE_URL = "https://newsapi.org/v2"

# NewsAPI keeps placeholders for articles withdrawn by the publisher.
_REMOVED = "[Removed]"


def parse_news_api_response(
    data: Any,
    *,
    category: Optional[Category] = None,
    fetched_at: Optional[datetime] = None,
) -> List[Article]:
    """Validate a NewsAPI response body and normalize its articles.

    Expected object: ``{"status": "ok", "articles": [...]}``. An error status
    or a missing ``articles`` list raises ``ValueError``.
    """
    if not isinstance(data, dict):
        raise ValueError("NewsAPI response must be a JSON object")
    if data.get("status") != "ok":
        raise ValueError(f"NewsAPI status '{data.get('status')}': {data.get('message', 'no message')}")
    raw_articles = data.get("articles")
    if not isinstance(raw_articles, list):
        raise ValueError("NewsAPI response has no 'articles' list")

    fetched_at = fetched_at or datetime.now(timezone.utc)
    articles: List[Article] = []
    for raw in raw_articles:
        if not isinstance(raw, dict):
            logger.debug("Skipping malformed NewsAPI article: %r", raw)
            continue
        if raw.get("title") == _REMOVED:
            continue
        try:
            articles.append(normalize_news_api_article(raw, category=category, fetched_at=fetched_at))
        except (TypeError, ValueError, OverflowError) as exc:
            logger.warning("Skipping NewsAPI article that failed to normalize: %s", exc)
    return articles


class NewsApiClient(AsyncHTTPClient):
    """NewsAPI.org client. Every method returns an empty list when the API is unavailable."""

    upstream = "NewsAPI"

    def __init__(
        self,
        api_key: str = "",
        *,
        base_url: str = NEWS_API_BASE_URL,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(http=http, timeout=timeout)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._warned_missing_key = False

    def _has_key(self) -> bool:
        if self.api_key:
            return True
        if not self._warned_missing_key:
            logger.warning("NEWS_API_KEY is not set; NewsAPI requests will be served from fallback data")
            self._warned_missing_key = True
        return False

    async def _top_headlines(self, country: str, category: Category, page_size: int) -> List[Article]:
        data = await self._get_json(
            f"{self.base_url}/top-headlines",
            params={"country": country, "category": category.value, "pageSize": page_size},
            headers={"X-Api-Key": self.api_key},
        )
        articles = parse_news_api_response(data, category=category)
        if not articles:
            raise UpstreamUnavailable(self.upstream, f"no articles for {country}/{category.value}")
        return articles

    async def fetch_top_headlines(
        self,
        country: str = "us",
        category: Category | str = Category.GENERAL,
        page_size: int = 10,
    ) -> List[Article]:
        category = Category.parse(category)
        if not self._has_key():
            return []
        logger.debug("Fetching top headlines country=%s category=%s pageSize=%d", country, category.value, page_size)
        articles = await guarded(
            f"{self.upstream} top-headlines {country}/{category.value}",
            self._top_headlines(country, category, page_size),
            timeout=self.timeout,
            sentinel=[],
        )
        if articles:
            logger.info("Fetched %d articles for %s/%s", len(articles), country, category.value)
        return articles

    async def _everything(self, query: str, language: str, page_size: int) -> List[Article]:
        data = await self._get_json(
            f"{self.base_url}/everything",
            params={"q": query, "language": language, "pageSize": page_size},
            headers={"X-Api-Key": self.api_key},
        )
        return parse_news_api_response(data)

    async def search(self, query: str, language: str = "en", page_size: int = 10) -> List[Article]:
        if not query or not query.strip():
            return []
        if not self._has_key():
            return []
        logger.debug("Searching NewsAPI for %r", query)
        articles = await guarded(
            f"{self.upstream} search",
            self._everything(query.strip(), language, page_size),
            timeout=self.timeout,
            sentinel=[],
        )
        logger.info("NewsAPI search for %r returned %d articles", query, len(articles))
        return articles
