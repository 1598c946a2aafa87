from __future__ import annotations

from typing import Any, Optional

import httpx

from ..models import ClaimWorthiness
from ..utils.logging import get_logger
from .http import AsyncHTTPClient, guarded

logger = get_logger("nw.fetchers.claimbuster")

CLAIMBUSTER_API_URL = "https://idir.uta.edu/claimbuster/api/v2/score/text/"
WORTHINESS_THRESHOLD = 0.5


def parse_claimbuster_response(text: str, data: Any) -> ClaimWorthiness:
    """Average the per-sentence scores ClaimBuster returns.

    ``results`` may be a list or a mapping of sentence results, each carrying a
    numeric ``score``.
    """
    if not isinstance(data, dict):
        raise ValueError("ClaimBuster response must be a JSON object")
    results = data.get("results")
    if isinstance(results, dict):
        results = list(results.values())
    if not isinstance(results, list) or not results:
        raise ValueError("ClaimBuster response has no results")

    scores = [
        float(r["score"])
        for r in results
        if isinstance(r, dict) and isinstance(r.get("score"), (int, float)) and not isinstance(r.get("score"), bool)
    ]
    average = sum(scores) / len(scores) if scores else 0.0
    return ClaimWorthiness(text=text, score=average, is_fact_check_worthy=average > WORTHINESS_THRESHOLD)


class ClaimBusterClient(AsyncHTTPClient):
    """Claim-worthiness scoring. Returns None when the API is unavailable."""

    upstream = "ClaimBuster"

    def __init__(self, api_key: str = "", *, http: Optional[httpx.AsyncClient] = None, timeout: float = 10.0) -> None:
        super().__init__(http=http, timeout=timeout)
        self.api_key = api_key

    async def _score(self, text: str) -> ClaimWorthiness:
        data = await self._post_json(
            CLAIMBUSTER_API_URL,
            payload={"input_text": text},
            headers={"x-api-key": self.api_key},
        )
        return parse_claimbuster_response(text, data)

    async def score(self, text: str) -> Optional[ClaimWorthiness]:
        if not text or not text.strip():
            return None
        if not self.api_key:
            logger.warning("CLAIMBUSTER_API_KEY is not set; skipping claim-worthiness scoring")
            return None
        logger.debug("Scoring claim-worthiness with ClaimBuster")
        return await guarded(self.upstream, self._score(text.strip()), timeout=self.timeout, sentinel=None)
