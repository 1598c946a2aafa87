from __future__ import annotations

import html
import re
import time
import unicodedata
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional

from bs4 import BeautifulSoup

from ..models import Article, Category
from ..utils.logging import get_logger

_whitespace_re = re.compile(r"\s+")
_control_chars_re = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")

_PUNCT_TRANSLATION = {
    ord("\u2018"): "'",  # left single quote
    ord("\u2019"): "'",  # right single quote
    ord("\u201C"): '"',  # left double quote
    ord("\u201D"): '"',  # right double quote
    ord("\u2013"): "-",  # en dash
    ord("\u2014"): "-",  # em dash
    ord("\u00A0"): " ",  # non-breaking space
}

NO_TITLE = "No title"
NO_DESCRIPTION = "No description"
NO_LINK = "#"
UNKNOWN_SOURCE = "Unknown source"

_logger = get_logger("nw.processors.normalize")


def clean_html_to_text(raw_html: str | None) -> str:
    """Clean HTML to normalized plain text.

    - Strip tags
    - Unescape HTML entities
    - Collapse whitespace
    """
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")
    text = soup.get_text(" ")
    text = html.unescape(text)
    text = _whitespace_re.sub(" ", text)
    return text.strip()


def normalize_plain_text(text: str | None) -> str:
    """Normalize plain text for display and AI input.

    - Strip BOM
    - Replace curly quotes/dashes and non-breaking spaces
    - Unicode normalize (NFKC)
    - Remove control characters and collapse whitespace
    """
    if not text:
        return ""

    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")

    text = text.translate(_PUNCT_TRANSLATION)
    text = unicodedata.normalize("NFKC", text)
    text = _control_chars_re.sub(" ", text)
    return _whitespace_re.sub(" ", text).strip()


def truncate_text(text: str | None, max_length: int = 150) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def display_description(article: Article, max_length: int = 150) -> str:
    """Plain-text description for display: markup stripped first, then truncated."""
    return truncate_text(normalize_plain_text(clean_html_to_text(article.description)), max_length)


def parse_published(value: Any, *, fetched_at: datetime) -> datetime:
    """Parse an upstream timestamp into an aware UTC datetime.

    Accepts ISO 8601 strings (NewsAPI), RFC 822 strings (RSS), ``time.struct_time``
    (feedparser) and datetimes. Anything else yields ``fetched_at``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, time.struct_time):
        try:
            parsed = datetime(*value[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            _logger.debug("Invalid struct_time %r; using fetch time", value)
            return fetched_at
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(raw)
            except (TypeError, ValueError, IndexError):
                _logger.debug("Unparseable timestamp %r; using fetch time", raw)
                return fetched_at
    else:
        return fetched_at

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        # e.g. year 9999 with a negative offset lands past datetime.max in UTC
        _logger.debug("Timestamp %r out of range; using fetch time", value)
        return fetched_at


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_news_api_article(
    raw: Mapping[str, Any],
    *,
    category: Optional[Category] = None,
    fetched_at: Optional[datetime] = None,
) -> Article:
    """Map one NewsAPI ``articles[]`` element to an Article."""
    if not isinstance(raw, Mapping):
        raise ValueError(f"NewsAPI article must be an object, got {type(raw).__name__}")
    fetched_at = fetched_at or datetime.now(timezone.utc)
    source = raw.get("source") if isinstance(raw.get("source"), Mapping) else {}
    image = _text(raw.get("urlToImage"))
    return Article(
        title=normalize_plain_text(_text(raw.get("title"))) or NO_TITLE,
        link=_text(raw.get("url")) or NO_LINK,
        description=_text(raw.get("description")),
        published_at=parse_published(raw.get("publishedAt"), fetched_at=fetched_at),
        source_name=_text(source.get("name")) or UNKNOWN_SOURCE,
        image_url=image or None,
        category=category,
        content=_text(raw.get("content")),
    )


def _first_img_src(markup: str) -> Optional[str]:
    if not markup or "<img" not in markup:
        return None
    img = BeautifulSoup(markup, "html.parser").find("img", src=True)
    return img["src"] if img else None


def extract_image_url(entry: Mapping[str, Any]) -> Optional[str]:
    """Pick an image for an RSS entry.

    Precedence: media:content url, media:thumbnail url, image enclosure, first
    ``<img src>`` in the description markup.
    """
    for key in ("media_content", "media_thumbnail"):
        for media in entry.get(key) or []:
            url = media.get("url") if isinstance(media, Mapping) else None
            if url:
                return url

    for enclosure in entry.get("enclosures") or []:
        if not isinstance(enclosure, Mapping):
            continue
        mime = str(enclosure.get("type") or "")
        url = enclosure.get("href") or enclosure.get("url")
        if url and mime.startswith("image/"):
            return url

    return _first_img_src(_text(entry.get("summary")) or _text(entry.get("description")))


def normalize_rss_entry(
    entry: Mapping[str, Any],
    source_name: str,
    *,
    fetched_at: Optional[datetime] = None,
) -> Article:
    """Map one parsed feed entry (feedparser ``FeedParserDict``) to an Article."""
    fetched_at = fetched_at or datetime.now(timezone.utc)
    published = entry.get("published_parsed") or entry.get("updated_parsed") or entry.get("published")

    content_val = ""
    contents = entry.get("content")
    if contents and isinstance(contents, list):
        first = contents[0]
        content_val = _text(first.get("value")) if isinstance(first, Mapping) else ""

    return Article(
        title=normalize_plain_text(_text(entry.get("title"))) or NO_TITLE,
        link=_text(entry.get("link")) or NO_LINK,
        description=_text(entry.get("summary")) or NO_DESCRIPTION,
        published_at=parse_published(published, fetched_at=fetched_at),
        source_name=source_name or UNKNOWN_SOURCE,
        image_url=extract_image_url(entry),
        content=content_val,
    )
