from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import httpx

from ..models import Article
from ..processors.normalize import normalize_rss_entry
from ..utils.logging import get_logger
from .http import AsyncHTTPClient, guarded, validated_url

logger = get_logger("nw.fetchers.rss")


def parse_feed(body: bytes | str, source_name: str, *, fetched_at: Optional[datetime] = None) -> List[Article]:
    """Parse an RSS/Atom document into Articles.

    A document with no entries raises ``ValueError``; feedparser's ``bozo``
    flag alone does not, since it still parses most malformed feeds.
    """
    parsed = feedparser.parse(body)
    if getattr(parsed, "bozo", False):
        logger.debug("Feed 'bozo' flagged for %s: %s", source_name, getattr(parsed, "bozo_exception", None))

    entries = getattr(parsed, "entries", None) or []
    if not entries:
        raise ValueError(f"No items found in RSS feed from {source_name}")

    fetched_at = fetched_at or datetime.now(timezone.utc)
    articles: List[Article] = []
    for entry in entries:
        try:
            articles.append(normalize_rss_entry(entry, source_name, fetched_at=fetched_at))
        except (TypeError, ValueError, OverflowError) as exc:
            logger.warning("Skipping %s entry that failed to normalize: %s", source_name, exc)
    if not articles:
        raise ValueError(f"No usable items in RSS feed from {source_name}")
    return articles


class RssClient(AsyncHTTPClient):
    """Fetches RSS/Atom feeds over ``httpx`` and parses them with ``feedparser``.

    The request is made by ``httpx`` so the shared timeout and headers apply;
    ``feedparser`` only ever sees the downloaded body.
    """

    upstream = "RSS"

    def __init__(self, *, http: Optional[httpx.AsyncClient] = None, timeout: float = 10.0) -> None:
        super().__init__(http=http, timeout=timeout)

    async def _fetch(self, url: str, source_name: str) -> List[Article]:
        body = await self._get_text(validated_url(url))
        return parse_feed(body, source_name)

    async def fetch_feed(self, url: str, source_name: str) -> List[Article]:
        logger.debug("Fetching RSS from %s", url)
        items = await guarded(
            f"{self.upstream} {source_name}",
            self._fetch(url, source_name),
            timeout=self.timeout,
            sentinel=[],
        )
        if items:
            logger.info("Fetched %d RSS entries from %s", len(items), source_name)
        return items
