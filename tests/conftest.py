from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from newswatch.aggregator import Aggregator
from newswatch.fetchers import NewsApiClient, RssClient
from newswatch.models import Article, Category, FeedSource
from newswatch.utils.config_loader import load_fallback_catalog

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_article(title, *, hours_ago=0.0, source="Test Source", category=None):
    return Article(
        title=title,
        link=f"https://example.com/{title.replace(' ', '-').lower()}",
        description=f"About {title}",
        published_at=NOW - timedelta(hours=hours_ago),
        source_name=source,
        category=category,
    )


@pytest.fixture
def catalog():
    """The packaged fallback datasets."""
    return load_fallback_catalog()


@pytest.fixture
def feeds():
    return [
        FeedSource(name="BBC Arabic", url="https://feeds.bbci.co.uk/arabic/rss.xml", group="news"),
        FeedSource(name="Google News", url="https://news.google.com/rss", group="news"),
        FeedSource(name="Snopes", url="https://www.snopes.com/feed/", group="factcheck"),
        FeedSource(name="FactCheck.org", url="https://www.factcheck.org/feed/", group="factcheck"),
    ]


@pytest.fixture
def news_client():
    """NewsAPI stand-in whose calls all come back empty unless a test says otherwise."""
    client = MagicMock(spec=NewsApiClient)
    client.fetch_top_headlines = AsyncMock(return_value=[])
    client.search = AsyncMock(return_value=[])
    return client


@pytest.fixture
def rss_client():
    client = MagicMock(spec=RssClient)
    client.fetch_feed = AsyncMock(return_value=[])
    return client


@pytest.fixture
def engine(news_client, rss_client, catalog, feeds):
    return Aggregator(news_client, rss_client, catalog, feeds, clock=lambda: NOW)
