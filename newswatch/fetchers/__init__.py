"""Upstream clients for news, RSS, fact-check and claim-worthiness APIs."""

from .http import AsyncHTTPClient, PageClient, guarded
from .news_api import NewsApiClient
from .rss import RssClient
from .fact_check import FactCheckClient
from .claimbuster import ClaimBusterClient

__all__ = [
    "AsyncHTTPClient",
    "PageClient",
    "guarded",
    "NewsApiClient",
    "RssClient",
    "FactCheckClient",
    "ClaimBusterClient",
]
