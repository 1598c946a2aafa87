"""Command-line entrypoint for the newswatch aggregator.

Each subcommand runs one engine or orchestrator operation and prints its
result as JSON on stdout; logs go to stderr.

Exit codes: 0 on success, 2 on invalid input, 1 when claim verification
could not be produced.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Dict, List

from dotenv import load_dotenv

from .aggregator import Aggregator
from .errors import ValidationError, VerificationFailed
from .models import AggregationResult, Article, Category
from .orchestrator import Orchestrator
from .processors.normalize import display_description
from .utils.config_loader import ConfigError
from .utils.logging import configure_logging, get_logger
from .utils.settings import Settings

logger = get_logger("nw.cli")

EXIT_OK = 0
EXIT_VERIFICATION_FAILED = 1
EXIT_INVALID_INPUT = 2

PROBE_FACT_CHECK_QUERY = "climate change"
PROBE_CLAIM = "The unemployment rate fell to 3.5 percent last year."
PROBE_ARTICLE_URL = "https://example.com/probe"
PROBE_ARTICLE_TEXT = (
    "The tower is 324 metres tall, about the same height as an 81-storey building, "
    "and the tallest structure in Paris. Its base is square, measuring 125 metres on each side."
)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="newswatch",
        description="Aggregate news headlines and fact checks, and analyze articles and claims",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("latest", help="Latest general headlines from several locales")
    sub.add_parser("trending", help="News feeds merged with US general headlines")
    sub.add_parser("fact-checks", help="Items from all fact-check feeds")
    sub.add_parser("categories", help="Headlines for every category")

    category = sub.add_parser("category", help="Refresh a single category")
    category.add_argument("name", help=f"One of: {', '.join(c.value for c in Category)}")

    headlines = sub.add_parser("headlines", help="Top headlines for one country and category")
    headlines.add_argument("--country", default="us")
    headlines.add_argument("--category", default=Category.GENERAL.value)
    headlines.add_argument("--page-size", type=int, default=10)

    search = sub.add_parser("search", help="Search news articles")
    search.add_argument("query")
    search.add_argument("--language", default="en")
    search.add_argument("--page-size", type=int, default=10)

    analyze = sub.add_parser("analyze", help="Summarize an article and assess it for misinformation")
    analyze.add_argument("url")

    verify = sub.add_parser("verify", help="Verify a free-text claim")
    verify.add_argument("claim")

    context = sub.add_parser("claim-context", help="Claim-worthiness score and published fact checks")
    context.add_argument("claim")
    context.add_argument("--language", default="en")

    sub.add_parser("check-apis", help="Probe every upstream and report which are live")
    return parser.parse_args(argv)


def article_payload(article: Article) -> Dict[str, Any]:
    """Article JSON for display: plain-text description and the category label."""
    payload = article.to_dict()
    payload["description"] = display_description(article)
    payload["categoryLabel"] = article.category.label if article.category else None
    return payload


def result_payload(result: AggregationResult) -> Dict[str, Any]:
    payload = result.to_dict()
    payload["items"] = [article_payload(a) for a in result.items]
    return payload


def _categories_to_dict(results: Dict[Category, AggregationResult]) -> Dict[str, Any]:
    return {c.value: result_payload(r) for c, r in results.items()}


async def _run_engine(args: argparse.Namespace, settings: Settings) -> Any:
    async with Aggregator.from_settings(settings) as engine:
        if args.command == "latest":
            return result_payload(await engine.latest_news())
        if args.command == "trending":
            return result_payload(await engine.trending_news())
        if args.command == "fact-checks":
            return result_payload(await engine.fetch_all_fact_checks())
        if args.command == "categories":
            return _categories_to_dict(await engine.categorized_news())
        if args.command == "category":
            return result_payload(await engine.refresh_category(_parse_category(args.name)))
        if args.command == "headlines":
            result = await engine.fetch_top_headlines(args.country, _parse_category(args.category), args.page_size)
            return result_payload(result)
        if args.command == "search":
            return result_payload(await engine.search_news(args.query, args.language, args.page_size))
    raise ValueError(f"Unknown command: {args.command}")


async def _run_orchestrator(args: argparse.Namespace, settings: Settings) -> Any:
    async with Orchestrator.from_settings(settings) as orch:
        if args.command == "analyze":
            return (await orch.analyze_article(args.url)).to_dict()
        if args.command == "verify":
            return (await orch.verify_claim(args.claim)).to_dict()
        if args.command == "claim-context":
            return (await orch.enrich_claim(args.claim, args.language)).to_dict()
    raise ValueError(f"Unknown command: {args.command}")


def _parse_category(value: str) -> Category:
    try:
        return Category.parse(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None


async def _probe(name: str, check: Callable[[], Awaitable[bool]]) -> Dict[str, str]:
    try:
        live = await check()
    except Exception as exc:  # noqa: BLE001 - a probe reports, never raises
        logger.warning("Probe %s failed: %s", name, exc)
        live = False
    return {"name": name, "status": "live" if live else "unavailable"}


async def check_apis(settings: Settings) -> Dict[str, Any]:
    """Call each upstream once with a fixed sample and report which answered."""
    async with Aggregator.from_settings(settings) as engine, Orchestrator.from_settings(settings) as orch:
        async def _news_api() -> bool:
            return bool(await engine.news.fetch_top_headlines("us", Category.GENERAL, 5))

        def _feed(url: str, name: str) -> Callable[[], Awaitable[bool]]:
            async def check() -> bool:
                return bool(await engine.rss.fetch_feed(url, name))

            return check

        async def _fact_check() -> bool:
            return bool(await orch.fact_checks.search_fact_checks(PROBE_FACT_CHECK_QUERY, "en", 1))

        async def _claimbuster() -> bool:
            return await orch.claimbuster.score(PROBE_CLAIM) is not None

        async def _ai() -> bool:
            summary = await asyncio.wait_for(
                orch.ai.summarize_article(PROBE_ARTICLE_URL, PROBE_ARTICLE_TEXT), timeout=settings.ai_timeout
            )
            return bool(summary.summary)

        probes = [("NewsAPI", _news_api)]
        probes += [(f"RSS {f.name}", _feed(f.url, f.name)) for f in engine.feeds]
        probes += [
            ("Google Fact Check", _fact_check),
            ("ClaimBuster", _claimbuster),
            (f"AI ({settings.processing_backend})", _ai),
        ]
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(_probe(name, check)) for name, check in probes]

    results = [t.result() for t in tasks]
    return {"apis": results, "live": sum(1 for r in results if r["status"] == "live"), "total": len(results)}


async def run(args: argparse.Namespace, settings: Settings) -> Any:
    if args.command == "check-apis":
        return await check_apis(settings)
    if args.command in ("analyze", "verify", "claim-context"):
        return await _run_orchestrator(args, settings)
    return await _run_engine(args, settings)


def _print_json(payload: Any) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def main(argv: List[str] | None = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        settings = Settings()
        payload = asyncio.run(run(args, settings))
    except ValidationError as exc:
        logger.error("Invalid input: %s", exc)
        _print_json({"error": str(exc)})
        return EXIT_INVALID_INPUT
    except VerificationFailed as exc:
        logger.error("Verification failed: %s", exc)
        _print_json({"error": str(exc)})
        return EXIT_VERIFICATION_FAILED
    except (ConfigError, ValueError) as exc:
        logger.error("Configuration error: %s", exc)
        _print_json({"error": str(exc)})
        return EXIT_INVALID_INPUT

    _print_json(payload)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
