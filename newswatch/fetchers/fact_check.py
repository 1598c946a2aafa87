from __future__ import annotations

from typing import Any, List, Optional

import httpx

from ..models import FactCheckClaim, FactCheckReview
from ..utils.logging import get_logger
from .http import AsyncHTTPClient, guarded

logger = get_logger("nw.fetchers.fact_check")

FACT_CHECK_API_URL = "https://factchecktools.googleapis.com/v1alpha1/claims:search"


def _parse_review(raw: Any) -> Optional[FactCheckReview]:
    if not isinstance(raw, dict) or not raw.get("url"):
        return None
    publisher = raw.get("publisher") if isinstance(raw.get("publisher"), dict) else {}
    return FactCheckReview(
        publisher_name=str(publisher.get("name") or "Unknown"),
        publisher_site=str(publisher.get("site") or ""),
        url=str(raw["url"]),
        title=str(raw.get("title") or ""),
        review_date=raw.get("reviewDate"),
        textual_rating=raw.get("textualRating"),
        language_code=raw.get("languageCode"),
    )


def parse_fact_check_response(data: Any) -> List[FactCheckClaim]:
    """Validate a ``claims:search`` body. A body without ``claims`` means no matches."""
    if not isinstance(data, dict):
        raise ValueError("Fact Check API response must be a JSON object")
    raw_claims = data.get("claims") or []
    if not isinstance(raw_claims, list):
        raise ValueError("'claims' must be a list")

    claims: List[FactCheckClaim] = []
    for raw in raw_claims:
        if not isinstance(raw, dict) or not raw.get("text"):
            continue
        reviews = [r for r in (_parse_review(x) for x in raw.get("claimReview") or []) if r is not None]
        claims.append(
            FactCheckClaim(
                text=str(raw["text"]),
                claimant=raw.get("claimant"),
                claim_date=raw.get("claimDate"),
                reviews=tuple(reviews),
            )
        )
    return claims


class FactCheckClient(AsyncHTTPClient):
    """Google Fact Check Tools search."""

    upstream = "Fact Check API"

    def __init__(self, api_key: str = "", *, http: Optional[httpx.AsyncClient] = None, timeout: float = 10.0) -> None:
        super().__init__(http=http, timeout=timeout)
        self.api_key = api_key

    async def _search(self, query: str, language: str, max_results: int) -> List[FactCheckClaim]:
        data = await self._get_json(
            FACT_CHECK_API_URL,
            params={"key": self.api_key, "query": query, "languageCode": language, "pageSize": max_results},
        )
        return parse_fact_check_response(data)

    async def search_fact_checks(self, query: str, language: str = "en", max_results: int = 10) -> List[FactCheckClaim]:
        if not query or not query.strip():
            return []
        if not self.api_key:
            logger.warning("GOOGLE_FACT_CHECK_API_KEY is not set; skipping fact-check search")
            return []
        logger.debug("Searching fact checks for %r", query)
        claims = await guarded(
            self.upstream,
            self._search(query.strip(), language, max_results),
            timeout=self.timeout,
            sentinel=[],
        )
        logger.info("Found %d fact checks for %r", len(claims), query)
        return claims

    async def claims_for(self, claim: str, language: str = "en") -> List[FactCheckClaim]:
        return await self.search_fact_checks(claim, language, 5)
