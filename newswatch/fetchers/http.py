from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Dict, Optional, TypeVar
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from ..errors import UpstreamUnavailable
from ..processors.normalize import normalize_plain_text
from ..utils.logging import get_logger

logger = get_logger("nw.fetchers.http")

T = TypeVar("T")

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/127.0.0.0 Safari/537.36"
    )
}


def validated_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL for HTTP fetch: {url}")
    return url


async def guarded(upstream: str, call: Awaitable[T], *, timeout: float, sentinel: T) -> T:
    """Await ``call`` under a hard deadline and turn any failure into ``sentinel``.

    The in-flight request is cancelled when the deadline passes.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %.1fs", upstream, timeout)
    except httpx.HTTPError as exc:
        logger.warning("%s request error: %s", upstream, exc)
    except UpstreamUnavailable as exc:
        logger.warning("%s unavailable: %s", upstream, exc.reason)
    except ValueError as exc:
        logger.warning("%s returned an unexpected payload: %s", upstream, exc)
    return sentinel


class AsyncHTTPClient:
    """Base for upstream clients sharing one ``httpx.AsyncClient``.

    A client passed in is borrowed and left open; otherwise one is created on
    first use and closed by ``aclose``.
    """

    upstream = "http"

    def __init__(self, *, http: Optional[httpx.AsyncClient] = None, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self._http = http
        self._owns_http = http is None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                headers=DEFAULT_HEADERS,
                timeout=self.timeout,
                follow_redirects=True,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            )
        return self._http

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _check_status(self, resp: httpx.Response) -> None:
        if resp.is_error:
            raise UpstreamUnavailable(self.upstream, f"HTTP {resp.status_code}")

    async def _get_json(self, url: str, *, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Any:
        resp = await self.http.get(url, params=params, headers=headers)
        self._check_status(resp)
        return resp.json()

    async def _post_json(self, url: str, *, payload: Any, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Any:
        resp = await self.http.post(url, json=payload, params=params, headers=headers)
        self._check_status(resp)
        return resp.json()

    async def _get_text(self, url: str) -> bytes:
        resp = await self.http.get(url)
        self._check_status(resp)
        return resp.content


def extract_page_text(raw_html: str) -> str:
    """Pull readable text out of an article page."""
    soup = BeautifulSoup(raw_html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    # Very simple heuristic extraction, preferring semantic containers.
    main = soup.find("article") or soup.find("main") or soup.body
    text = main.get_text(" ", strip=True) if main else ""
    if not text:
        meta_desc = soup.find("meta", attrs={"name": "description"})
        text = meta_desc["content"] if meta_desc and meta_desc.get("content") else ""
    return normalize_plain_text(text)


class PageClient(AsyncHTTPClient):
    """Downloads article pages so their text can be handed to the AI detector."""

    upstream = "Article page"

    def __init__(self, *, http: Optional[httpx.AsyncClient] = None, timeout: float = 10.0, max_chars: int = 8000) -> None:
        super().__init__(http=http, timeout=timeout)
        self.max_chars = max_chars

    async def _fetch(self, url: str) -> Optional[str]:
        logger.debug("Fetching article page %s", url)
        body = await self._get_text(validated_url(url))
        text = extract_page_text(body.decode("utf-8", errors="replace"))
        if not text:
            raise UpstreamUnavailable(self.upstream, "no readable text")
        return text[: self.max_chars]

    async def fetch_article_text(self, url: str) -> Optional[str]:
        text = await guarded(self.upstream, self._fetch(url), timeout=self.timeout, sentinel=None)
        if text:
            logger.info("Fetched %d characters from %s", len(text), url)
        return text
