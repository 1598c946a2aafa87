"""Processing: source normalization and AI analysis backends."""

from .normalize import (
    clean_html_to_text,
    display_description,
    extract_image_url,
    normalize_news_api_article,
    normalize_plain_text,
    normalize_rss_entry,
    parse_published,
    truncate_text,
)

__all__ = [
    "clean_html_to_text",
    "display_description",
    "extract_image_url",
    "normalize_news_api_article",
    "normalize_plain_text",
    "normalize_rss_entry",
    "parse_published",
    "truncate_text",
]
