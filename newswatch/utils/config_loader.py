from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Tuple
from urllib.parse import urlparse

import yaml

from ..fallback import FallbackCatalog, FallbackEntry
from ..models import Category, FeedSource


class ConfigError(Exception):
    """Raised when a configuration file is invalid or missing required fields."""


DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_FEEDS_PATH = DATA_DIR / "feeds.yaml"
DEFAULT_FALLBACK_PATH = DATA_DIR / "fallback.yaml"

REQUIRED_FEED_FIELDS = {"name", "url"}
REQUIRED_ENTRY_FIELDS = {"title", "link", "description", "source_name"}
ALLOWED_GROUPS = {"news", "factcheck"}


def _read_yaml(path: Path | str) -> dict:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {config_path} must be a mapping")
    return data


def _validate_url(url_str: str) -> None:
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}'. Must be absolute http(s) URL.")


def _validate_feed_dict(entry: dict) -> None:
    """Validate a single feed mapping from YAML.

    Required fields: name (str), url (http/https).
    Optional fields: group ('news' | 'factcheck', default 'news').
    """
    missing = REQUIRED_FEED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    _validate_url(str(entry["url"]).strip())

    group = entry.get("group", "news")
    if group not in ALLOWED_GROUPS:
        raise ConfigError(f"Invalid group '{group}'. Must be one of {sorted(ALLOWED_GROUPS)}.")


def load_feeds_config(path: Path | str = DEFAULT_FEEDS_PATH) -> List[FeedSource]:
    """Load ``feeds.yaml`` into typed ``FeedSource`` instances.

    YAML structure:
      - Key ``feeds``: list of mappings with ``name``, ``url`` and optional ``group``.

    Unknown top-level keys are ignored for forward compatibility.
    """
    data = _read_yaml(path)
    feeds_raw: Iterable[dict] = data.get("feeds") or []
    if not isinstance(feeds_raw, list):
        raise ConfigError("'feeds' must be a list in the YAML configuration")

    feeds: List[FeedSource] = []
    seen = set()
    for item in feeds_raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each feed must be a mapping, got: {type(item)}")
        _validate_feed_dict(item)
        name = str(item["name"]).strip()
        if name in seen:
            raise ConfigError(f"Duplicate feed name '{name}'")
        seen.add(name)
        feeds.append(FeedSource(name=name, url=str(item["url"]).strip(), group=item.get("group", "news")))
    return feeds


def _coerce_entry(entry: dict) -> FallbackEntry:
    if not isinstance(entry, dict):
        raise ConfigError(f"Each fallback entry must be a mapping, got: {type(entry)}")
    missing = REQUIRED_ENTRY_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")
    try:
        age_hours = float(entry.get("age_hours", 0) or 0)
    except (TypeError, ValueError):
        raise ConfigError(f"'age_hours' must be a number in {entry}") from None
    if age_hours < 0:
        raise ConfigError(f"'age_hours' must not be negative in {entry}")
    image_url = entry.get("image_url")
    return FallbackEntry(
        title=str(entry["title"]).strip(),
        link=str(entry["link"]).strip(),
        description=str(entry["description"]).strip(),
        source_name=str(entry["source_name"]).strip(),
        age_hours=age_hours,
        image_url=str(image_url).strip() if image_url else None,
        content=str(entry.get("content") or "").strip(),
    )


def _coerce_entries(raw, where: str) -> Tuple[FallbackEntry, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ConfigError(f"'{where}' must be a list of entries")
    return tuple(_coerce_entry(e) for e in raw)


def load_fallback_catalog(path: Path | str = DEFAULT_FALLBACK_PATH) -> FallbackCatalog:
    """Load the static fallback datasets.

    YAML structure:
      - ``headlines``: mapping of category name to a list of entries
      - ``feeds``: mapping of feed source name to a list of entries

    Each entry has title, link, description, source_name and optional
    age_hours, image_url, content.
    """
    data = _read_yaml(path)

    headlines_raw = data.get("headlines") or {}
    if not isinstance(headlines_raw, dict):
        raise ConfigError("'headlines' must be a mapping of category to entries")
    headlines: Dict[Category, Tuple[FallbackEntry, ...]] = {}
    for key, entries in headlines_raw.items():
        try:
            category = Category.parse(key)
        except ValueError as exc:
            raise ConfigError(str(exc)) from None
        headlines[category] = _coerce_entries(entries, f"headlines.{key}")

    feeds_raw = data.get("feeds") or {}
    if not isinstance(feeds_raw, dict):
        raise ConfigError("'feeds' must be a mapping of source name to entries")
    feeds = {str(name).strip(): _coerce_entries(entries, f"feeds.{name}") for name, entries in feeds_raw.items()}

    return FallbackCatalog(headlines=headlines, feeds=feeds)
