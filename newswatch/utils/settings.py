from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None


@dataclass(slots=True)
class Settings:
    """Runtime settings resolved from the environment at construction time.

    Missing credentials are not an error: the matching upstream degrades to
    always-fallback behavior.
    """

    news_api_key: str = field(default_factory=lambda: _env("NEWS_API_KEY"))
    news_api_base_url: str = field(default_factory=lambda: _env("NEWS_API_BASE_URL", "https://newsapi.org/v2"))
    fact_check_api_key: str = field(default_factory=lambda: _env("GOOGLE_FACT_CHECK_API_KEY"))
    claimbuster_api_key: str = field(default_factory=lambda: _env("CLAIMBUSTER_API_KEY"))

    processing_backend: str = field(default_factory=lambda: _env("PROCESSING_BACKEND", "gemini").lower())

    # Data APIs answer quickly; AI models may cold-start.
    data_timeout: float = field(default_factory=lambda: _env_float("NEWSWATCH_DATA_TIMEOUT", 10.0))
    ai_timeout: float = field(default_factory=lambda: _env_float("NEWSWATCH_AI_TIMEOUT", 30.0))

    claim_min_length: int = field(default_factory=lambda: int(_env_float("NEWSWATCH_CLAIM_MIN_LENGTH", 10)))
    feeds_path: str = field(default_factory=lambda: _env("NEWSWATCH_FEEDS_PATH"))
    fallback_path: str = field(default_factory=lambda: _env("NEWSWATCH_FALLBACK_PATH"))
