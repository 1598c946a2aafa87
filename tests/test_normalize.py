import time
from datetime import datetime, timezone

from newswatch.models import Category
from newswatch.processors.normalize import (
    NO_DESCRIPTION,
    NO_LINK,
    NO_TITLE,
    UNKNOWN_SOURCE,
    clean_html_to_text,
    display_description,
    extract_image_url,
    normalize_news_api_article,
    normalize_plain_text,
    normalize_rss_entry,
    parse_published,
    truncate_text,
)

FETCHED_AT = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_clean_html_to_text():
    assert clean_html_to_text("<p>Hello&nbsp;<b>world</b></p>\n\n<p>again</p>") == "Hello world again"
    assert clean_html_to_text(None) == ""


def test_normalize_plain_text_replaces_typographic_punctuation():
    raw = "\ufeff\u201cQuoted\u201d \u2013 it\u2019s fine\x07"
    assert normalize_plain_text(raw) == "\"Quoted\" - it's fine"


def test_truncate_text():
    assert truncate_text("short") == "short"
    assert truncate_text("x" * 200) == "x" * 150 + "..."
    assert truncate_text("abcdef", max_length=3) == "abc..."
    assert truncate_text(None) == ""


def test_display_description_strips_markup_before_truncating():
    article = normalize_rss_entry({"summary": "<p>" + "word " * 50 + "</p>"}, "Feed", fetched_at=FETCHED_AT)
    shown = display_description(article)
    assert "<" not in shown
    assert shown.endswith("...")


def test_parse_published_formats():
    assert parse_published("2025-02-28T08:15:00Z", fetched_at=FETCHED_AT) == datetime(
        2025, 2, 28, 8, 15, tzinfo=timezone.utc
    )
    assert parse_published("Fri, 28 Feb 2025 10:15:00 +0200", fetched_at=FETCHED_AT) == datetime(
        2025, 2, 28, 8, 15, tzinfo=timezone.utc
    )
    struct = time.strptime("2025-02-28 08:15:00", "%Y-%m-%d %H:%M:%S")
    assert parse_published(struct, fetched_at=FETCHED_AT).hour == 8
    assert parse_published(datetime(2025, 2, 28, 8, 15), fetched_at=FETCHED_AT).tzinfo is not None


def test_parse_published_falls_back_to_fetch_time():
    assert parse_published("yesterday-ish", fetched_at=FETCHED_AT) == FETCHED_AT
    assert parse_published(None, fetched_at=FETCHED_AT) == FETCHED_AT
    assert parse_published("", fetched_at=FETCHED_AT) == FETCHED_AT


def test_news_api_article_defaults():
    article = normalize_news_api_article({"title": None, "source": "bad"}, category=Category.SCIENCE, fetched_at=FETCHED_AT)

    assert article.title == NO_TITLE
    assert article.link == NO_LINK
    assert article.description == ""
    assert article.source_name == UNKNOWN_SOURCE
    assert article.image_url is None
    assert article.published_at == FETCHED_AT
    assert article.category is Category.SCIENCE


def test_rss_entry_defaults():
    article = normalize_rss_entry({}, "", fetched_at=FETCHED_AT)

    assert article.title == NO_TITLE
    assert article.link == NO_LINK
    assert article.description == NO_DESCRIPTION
    assert article.source_name == UNKNOWN_SOURCE
    assert article.image_url is None
    assert article.published_at == FETCHED_AT


def test_rss_entry_content_and_source():
    entry = {
        "title": "  Title  ",
        "link": "https://feed.example/a",
        "summary": "Summary",
        "content": [{"value": "Full body"}],
        "published": "Sat, 01 Mar 2025 09:30:00 GMT",
    }
    article = normalize_rss_entry(entry, "Feed", fetched_at=FETCHED_AT)

    assert article.title == "Title"
    assert article.content == "Full body"
    assert article.source_name == "Feed"
    assert article.published_at == datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


def test_image_precedence():
    entry = {
        "media_content": [{"url": "https://img.example/content.jpg"}],
        "media_thumbnail": [{"url": "https://img.example/thumb.jpg"}],
        "enclosures": [{"href": "https://img.example/enclosure.jpg", "type": "image/jpeg"}],
        "summary": '<img src="https://img.example/inline.jpg">',
    }
    assert extract_image_url(entry) == "https://img.example/content.jpg"

    del entry["media_content"]
    assert extract_image_url(entry) == "https://img.example/thumb.jpg"

    del entry["media_thumbnail"]
    assert extract_image_url(entry) == "https://img.example/enclosure.jpg"

    del entry["enclosures"]
    assert extract_image_url(entry) == "https://img.example/inline.jpg"


def test_image_ignores_non_image_enclosures():
    entry = {
        "enclosures": [{"href": "https://audio.example/episode.mp3", "type": "audio/mpeg"}],
        "description": '<p>text</p><img alt="x" src="https://img.example/desc.png">',
    }
    assert extract_image_url(entry) == "https://img.example/desc.png"
    assert extract_image_url({"summary": "no markup"}) is None


def test_parse_published_out_of_range_uses_fetch_time():
    # representable as given, but past datetime.max once shifted to UTC
    assert parse_published("9999-12-31T23:00:00-05:00", fetched_at=FETCHED_AT) == FETCHED_AT
    assert parse_published("0001-01-01T00:30:00+05:00", fetched_at=FETCHED_AT) == FETCHED_AT


def test_news_api_article_with_out_of_range_date_keeps_fetch_time():
    article = normalize_news_api_article(
        {"title": "Far future", "publishedAt": "9999-12-31T23:00:00-05:00"}, fetched_at=FETCHED_AT
    )
    assert article.published_at == FETCHED_AT
