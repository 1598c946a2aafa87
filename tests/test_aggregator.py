import asyncio

import pytest

from newswatch.aggregator import ALL_SOURCES_FAILED, Aggregator, merge_newest_first
from newswatch.fallback import FallbackCatalog
from newswatch.models import Category

from .conftest import NOW, make_article


def headlines_by_country(mapping):
    """side_effect for fetch_top_headlines returning per-country canned lists."""

    async def fetch(country, category, page_size):
        value = mapping.get(country, [])
        if isinstance(value, Exception):
            raise value
        return list(value)

    return fetch


def test_merge_keeps_arrival_order_for_equal_timestamps():
    a = make_article("first")
    b = make_article("second")
    c = make_article("third")
    older = make_article("older", hours_ago=5)

    merged = merge_newest_first([[older, a], [b], [c]], limit=10)

    assert [x.title for x in merged] == ["first", "second", "third", "older"]


def test_merge_truncates_to_limit():
    items = [make_article(f"item {i}", hours_ago=i) for i in range(12)]
    assert len(merge_newest_first([items], limit=5)) == 5
    assert merge_newest_first([items], limit=0) == []


@pytest.mark.asyncio
async def test_latest_news_serves_fallback_for_every_failed_locale(engine, news_client, catalog):
    result = await engine.latest_news()

    assert result.used_fallback is True
    assert result.error is None
    assert result.fallback_sources == ("newsapi:us/general", "newsapi:gb/general", "newsapi:ae/general")
    assert len(result.items) == 3 * len(catalog.headline_entries[Category.GENERAL])
    assert all(a.category is Category.GENERAL for a in result.items)
    # the alternate locale is never consulted while fallback data exists
    countries = [c.args[0] for c in news_client.fetch_top_headlines.await_args_list]
    assert countries == ["us", "gb", "ae"]


@pytest.mark.asyncio
async def test_latest_news_is_bounded_and_newest_first(engine, news_client):
    news_client.fetch_top_headlines.side_effect = headlines_by_country(
        {
            "us": [make_article(f"us {i}", hours_ago=i * 3) for i in range(5)],
            "gb": [make_article(f"gb {i}", hours_ago=i * 3 + 1) for i in range(3)],
            "ae": [make_article(f"ae {i}", hours_ago=i * 3 + 2) for i in range(2)] * 2,
        }
    )

    result = await engine.latest_news()

    assert len(result.items) == 10
    stamps = [a.published_at for a in result.items]
    assert stamps == sorted(stamps, reverse=True)
    assert result.used_fallback is False
    assert result.fallback_sources == ()


@pytest.mark.asyncio
async def test_latest_news_equal_timestamps_follow_branch_order(engine, news_client):
    news_client.fetch_top_headlines.side_effect = headlines_by_country(
        {
            "us": [make_article("us a"), make_article("us b")],
            "gb": [make_article("gb a")],
            "ae": [make_article("ae a")],
        }
    )

    result = await engine.latest_news()

    assert [a.title for a in result.items] == ["us a", "us b", "gb a", "ae a"]


@pytest.mark.asyncio
async def test_latest_news_tries_alternate_when_everything_is_empty(news_client, rss_client, feeds):
    empty = FallbackCatalog(headlines={}, feeds={})
    engine = Aggregator(news_client, rss_client, empty, feeds, clock=lambda: NOW)
    news_client.fetch_top_headlines.side_effect = headlines_by_country({"fr": [make_article("bonjour")]})

    result = await engine.latest_news()

    assert [a.title for a in result.items] == ["bonjour"]
    assert news_client.fetch_top_headlines.await_args_list[-1].args == ("fr", Category.GENERAL, 10)


@pytest.mark.asyncio
async def test_empty_everywhere_reports_error(news_client, rss_client, feeds):
    empty = FallbackCatalog(headlines={}, feeds={})
    engine = Aggregator(news_client, rss_client, empty, feeds, clock=lambda: NOW)

    result = await engine.latest_news()

    assert result.items == ()
    assert result.error == ALL_SOURCES_FAILED
    assert result.used_fallback is True


@pytest.mark.asyncio
async def test_failing_branch_does_not_affect_siblings(engine, news_client, catalog):
    news_client.fetch_top_headlines.side_effect = headlines_by_country(
        {
            "us": [make_article("us live")],
            "gb": RuntimeError("connection reset"),
            "ae": [make_article("ae live", hours_ago=1)],
        }
    )

    result = await engine.latest_news()

    titles = [a.title for a in result.items]
    assert "us live" in titles and "ae live" in titles
    assert result.fallback_sources == ("newsapi:gb/general",)
    fallback_titles = {e.title for e in catalog.headline_entries[Category.GENERAL]}
    assert fallback_titles <= set(titles)


@pytest.mark.asyncio
async def test_slow_branch_is_replaced_after_deadline(news_client, rss_client, catalog, feeds):
    engine = Aggregator(news_client, rss_client, catalog, feeds, branch_timeout=0.05, clock=lambda: NOW)

    async def fetch(country, category, page_size):
        if country == "us":
            await asyncio.sleep(5)
        return [make_article(f"{country} live")]

    news_client.fetch_top_headlines.side_effect = fetch

    result = await asyncio.wait_for(engine.latest_news(), timeout=2)

    assert result.fallback_sources == ("newsapi:us/general",)
    assert {"gb live", "ae live"} <= {a.title for a in result.items}


@pytest.mark.asyncio
async def test_categorized_news_has_every_category_from_fallback(engine, catalog):
    results = await engine.categorized_news()

    assert set(results) == set(Category)
    for category, result in results.items():
        expected = len(catalog.headline_entries[category]) * 2
        assert len(result.items) == min(expected, 5)
        assert result.used_fallback is True
        assert result.fallback_sources == (f"newsapi:us/{category.value}", f"newsapi:gb/{category.value}")
        assert all(a.category is category for a in result.items)


@pytest.mark.asyncio
async def test_categorized_news_merges_locales_per_category(engine, news_client):
    async def fetch(country, category, page_size):
        return [make_article(f"{country} {category.value} {i}", hours_ago=i, category=category) for i in range(page_size)]

    news_client.fetch_top_headlines.side_effect = fetch

    results = await engine.categorized_news()

    sports = results[Category.SPORTS]
    assert len(sports.items) == 5
    assert sports.used_fallback is False
    assert {a.title.split()[0] for a in sports.items} == {"us", "gb"}


@pytest.mark.asyncio
async def test_fetch_news_by_categories_returns_all_categories(engine, news_client):
    news_client.fetch_top_headlines.side_effect = headlines_by_country({"us": [make_article("only live")]})

    results = await engine.fetch_news_by_categories("us", 5)

    assert set(results) == set(Category)
    assert all(r.used_fallback is False for r in results.values())


@pytest.mark.asyncio
async def test_refresh_category_accepts_names_and_rejects_unknown(engine):
    result = await engine.refresh_category("Health")
    assert result.items and all(a.category is Category.HEALTH for a in result.items)
    assert len(result.items) <= 5

    with pytest.raises(ValueError):
        await engine.refresh_category("weather")


@pytest.mark.asyncio
async def test_trending_merges_feeds_with_headlines(engine, news_client, rss_client, catalog):
    async def fetch_feed(url, name):
        return [make_article(f"{name} live", hours_ago=2, source=name)] if name == "BBC Arabic" else []

    rss_client.fetch_feed.side_effect = fetch_feed
    news_client.fetch_top_headlines.side_effect = headlines_by_country({"us": [make_article("us headline")]})

    result = await engine.trending_news()

    assert result.fallback_sources == ("rss:Google News",)
    titles = [a.title for a in result.items]
    assert "us headline" in titles and "BBC Arabic live" in titles
    assert len(result.items) <= 10
    fetched = {c.args[1] for c in rss_client.fetch_feed.await_args_list}
    assert fetched == {"BBC Arabic", "Google News"}
    assert news_client.fetch_top_headlines.await_args.args == ("us", Category.GENERAL, 5)


@pytest.mark.asyncio
async def test_fact_checks_use_only_fact_check_feeds(engine, rss_client, catalog):
    result = await engine.fetch_all_fact_checks()

    fetched = {c.args[1] for c in rss_client.fetch_feed.await_args_list}
    assert fetched == {"Snopes", "FactCheck.org"}
    assert result.used_fallback is True
    assert {a.source_name for a in result.items} <= {"Snopes", "FactCheck.org"}


@pytest.mark.asyncio
async def test_search_with_blank_query_makes_no_calls(engine, news_client):
    result = await engine.search_news("   ")

    assert result.items == ()
    news_client.search.assert_not_awaited()


@pytest.mark.asyncio
async def test_fallback_timestamps_are_relative_to_now(engine):
    result = await engine.fetch_top_headlines("us", Category.GENERAL, 10)

    assert result.items[0].published_at == NOW
    assert all(a.published_at <= NOW for a in result.items)


@pytest.mark.asyncio
@pytest.mark.parametrize("category", list(Category))
async def test_top_headlines_never_empty_when_source_is_down(engine, news_client, category):
    news_client.fetch_top_headlines.side_effect = RuntimeError("NewsAPI down")

    result = await engine.fetch_top_headlines("us", category, 10)

    assert result.items
    assert result.used_fallback is True
    assert all(a.category is category for a in result.items)


@pytest.mark.asyncio
async def test_fetch_all_news_substitutes_per_feed(engine, rss_client, catalog):
    async def fetch_feed(url, name):
        return [make_article("Google live", source=name)] if name == "Google News" else []

    rss_client.fetch_feed.side_effect = fetch_feed

    result = await engine.fetch_all_news()

    assert result.fallback_sources == ("rss:BBC Arabic",)
    sources = {a.source_name for a in result.items}
    assert sources == {"Google News", "BBC Arabic"}
    assert len(result.items) <= 10


@pytest.mark.asyncio
async def test_fetch_feed_single_source(engine, rss_client, feeds):
    rss_client.fetch_feed.return_value = [make_article("snopes live", source="Snopes")]

    result = await engine.fetch_feed(feeds[2])

    assert [a.title for a in result.items] == ["snopes live"]
    rss_client.fetch_feed.assert_awaited_once_with(feeds[2].url, "Snopes")


@pytest.mark.asyncio
async def test_search_falls_back_to_flattened_headlines(engine, news_client, catalog):
    result = await engine.search_news("ceasefire", page_size=3)

    news_client.search.assert_awaited_once_with("ceasefire", "en", 3)
    assert len(result.items) == 3
    assert result.used_fallback is True
    assert result.items[0].title == catalog.headline_entries[Category.GENERAL][0].title


@pytest.mark.asyncio
async def test_bare_timeout_without_deadline_is_logged_and_substituted(engine, news_client, caplog):
    news_client.fetch_top_headlines.side_effect = TimeoutError()

    with caplog.at_level("WARNING", logger="nw.aggregator"):
        result = await engine.fetch_top_headlines("us", Category.GENERAL, 10)

    assert result.used_fallback is True
    messages = [r.getMessage() for r in caplog.records]
    assert any("newsapi:us/general timed out" in m for m in messages)
