from __future__ import annotations

import json
import re
from typing import Any, Dict

from ...models import ClaimVerification, FakeNewsAssessment, Summary, Verdict

_VERDICT_ALIASES = {
    "likelytrue": Verdict.LIKELY_TRUE,
    "likely true": Verdict.LIKELY_TRUE,
    "مرجح أنه صحيح": Verdict.LIKELY_TRUE,
    "likelyfalse": Verdict.LIKELY_FALSE,
    "likely false": Verdict.LIKELY_FALSE,
    "مرجح أنه خطأ": Verdict.LIKELY_FALSE,
    "uncertain": Verdict.UNCERTAIN,
    "غير مؤكد": Verdict.UNCERTAIN,
}


def extract_json_object(raw: str) -> Dict[str, Any]:
    """Return the first JSON object embedded in a model response.

    Tolerates code fences and prose around the object.
    """
    if not raw or not raw.strip():
        raise ValueError("Empty AI response")

    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        raise ValueError("No JSON object found in AI response")

    try:
        obj = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Malformed JSON in AI response: {exc}") from exc
    if not isinstance(obj, dict):
        raise ValueError("AI response JSON must be an object")
    return obj


def _required_str(obj: Dict[str, Any], key: str) -> str:
    val = obj.get(key)
    if not isinstance(val, str) or not val.strip():
        raise ValueError(f"'{key}' must be a non-empty string")
    return val.strip()


def parse_summary_response(raw: str) -> Summary:
    """Expected object: ``{"summary": str}``."""
    obj = extract_json_object(raw)
    return Summary(summary=_required_str(obj, "summary"))


def parse_fake_news_response(raw: str) -> FakeNewsAssessment:
    """Parse and validate a misinformation assessment.

    Expected object with keys:
      - isFakeNews: bool
      - confidenceScore: number in [0, 1]
      - reason: str
    """
    obj = extract_json_object(raw)

    is_fake = obj.get("isFakeNews")
    if not isinstance(is_fake, bool):
        raise ValueError("'isFakeNews' must be a boolean")

    confidence_val = obj.get("confidenceScore")
    if isinstance(confidence_val, bool):
        raise ValueError("'confidenceScore' must be a number")
    try:
        confidence = float(confidence_val)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid confidenceScore '{confidence_val}': {exc}") from exc
    if not (0.0 <= confidence <= 1.0):
        raise ValueError(f"confidenceScore out of range: {confidence}")

    return FakeNewsAssessment(is_fake_news=is_fake, confidence_score=confidence, reason=_required_str(obj, "reason"))


def parse_verdict(value: Any) -> Verdict:
    if isinstance(value, Verdict):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid verdict '{value}'")
    verdict = _VERDICT_ALIASES.get(value.strip().lower())
    if verdict is None:
        raise ValueError(f"Invalid verdict '{value}'")
    return verdict


def parse_verification_response(raw: str) -> ClaimVerification:
    """Expected object: ``{"verdict", "explanation", "supportingEvidence": [str]}``."""
    obj = extract_json_object(raw)

    evidence = obj.get("supportingEvidence", [])
    if not isinstance(evidence, list) or not all(isinstance(e, str) for e in evidence):
        raise ValueError("'supportingEvidence' must be a list of strings")

    return ClaimVerification(
        verdict=parse_verdict(obj.get("verdict")),
        explanation=_required_str(obj, "explanation"),
        supporting_evidence=tuple(e.strip() for e in evidence if e.strip()),
    )
