from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

FeedGroup = Literal["news", "factcheck"]


@dataclass(slots=True, frozen=True)
class FeedSource:
    """Configuration for one RSS feed."""

    name: str
    url: str
    group: FeedGroup = "news"
