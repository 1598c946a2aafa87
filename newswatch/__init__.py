"""Top-level package for the newswatch news aggregation service.

This package fetches headlines from NewsAPI and RSS feeds, merges them with
static fallback data when sources fail, and runs AI summarization,
misinformation detection and claim verification.
"""

__all__ = []
