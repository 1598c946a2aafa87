from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import httpx

from ...errors import AIUnavailable
from ...models import ClaimVerification, FakeNewsAssessment, Summary
from .base import AIClient

SUMMARIZATION_MODEL = "facebook/bart-large-cnn"
FAKE_NEWS_MODEL = "mrm8488/bert-tiny-finetuned-fake-news-detection"


def parse_summarization_output(data: Any) -> Summary:
    """BART returns ``[{"summary_text": ...}]`` (or a bare object on some deployments)."""
    item = data[0] if isinstance(data, list) and data else data
    text = item.get("summary_text") if isinstance(item, dict) else None
    if not isinstance(text, str) or not text.strip():
        raise ValueError("Unexpected response format from summarization model")
    return Summary(summary=text.strip())


def _find_label(scores: List[Dict[str, Any]], *needles: str) -> Optional[Dict[str, Any]]:
    for item in scores:
        if not isinstance(item.get("score"), (int, float)):
            continue
        label = str(item.get("label", "")).lower()
        if any(n in label for n in needles):
            return item
    return None


def parse_classification_output(data: Any) -> FakeNewsAssessment:
    """Turn ``[[{"label", "score"}, ...]]`` into an assessment.

    With both a fake and a real label present the higher score wins; with only
    one, it decides by the 0.5 mark.
    """
    scores = data[0] if isinstance(data, list) and data and isinstance(data[0], list) else data
    if not isinstance(scores, list) or not all(isinstance(s, dict) for s in scores):
        raise ValueError("Unexpected response format from fake news detection model")

    fake = _find_label(scores, "fake", "false")
    real = _find_label(scores, "real", "true")
    if fake and real:
        is_fake = float(fake["score"]) > float(real["score"])
        chosen = fake if is_fake else real
    elif fake:
        is_fake = float(fake["score"]) > 0.5
        chosen = fake
    elif real:
        is_fake = float(real["score"]) < 0.5
        chosen = real
    else:
        raise ValueError("No fake/real label in classifier output")

    score = float(chosen["score"])
    if not (0.0 <= score <= 1.0):
        raise ValueError(f"Classifier score out of range: {score}")
    return FakeNewsAssessment(
        is_fake_news=is_fake,
        confidence_score=score,
        reason=f"Classifier {FAKE_NEWS_MODEL} labelled the text '{chosen.get('label')}' with score {score:.2f}",
    )


class HuggingFaceClient(AIClient):
    """Hugging Face Inference API: BART summaries and a BERT fake-news classifier.

    Environment:
      - HUGGINGFACE_API_KEY
      - HUGGINGFACE_API_BASE (default: https://router.huggingface.co/hf-inference/models)

    The models work on text, so summaries need the article content. There is
    no claim-verification model; ``verify_claim`` always fails.
    """

    name = "huggingface"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        max_length: int = 150,
        min_length: int = 30,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("HUGGINGFACE_API_KEY", "")
        self.base_url = (
            base_url or os.environ.get("HUGGINGFACE_API_BASE", "https://router.huggingface.co/hf-inference/models")
        ).rstrip("/")
        self.max_length = max_length
        self.min_length = min_length
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._owns_http = http is None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _infer(self, model: str, payload: dict) -> Any:
        if not self.api_key:
            raise AIUnavailable(self.name, "HUGGINGFACE_API_KEY is not set")
        resp = await self._http.post(
            f"{self.base_url}/{model}",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        resp.raise_for_status()
        return resp.json()

    async def summarize_article(self, url: str, content: Optional[str] = None) -> Summary:
        if not content or not content.strip():
            raise AIUnavailable(self.name, f"no article text to summarize for {url}")
        data = await self._infer(
            SUMMARIZATION_MODEL,
            {
                "inputs": content,
                "parameters": {"max_length": self.max_length, "min_length": self.min_length, "do_sample": False},
            },
        )
        return parse_summarization_output(data)

    async def detect_fake_news(self, url: str, content: str) -> FakeNewsAssessment:
        if not content or not content.strip():
            raise AIUnavailable(self.name, f"no article text to classify for {url}")
        data = await self._infer(FAKE_NEWS_MODEL, {"inputs": content})
        return parse_classification_output(data)

    async def verify_claim(self, claim_text: str) -> ClaimVerification:
        raise AIUnavailable(self.name, "claim verification is not supported by this backend")
