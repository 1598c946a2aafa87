from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class Category(str, Enum):
    GENERAL = "general"
    BUSINESS = "business"
    TECHNOLOGY = "technology"
    ENTERTAINMENT = "entertainment"
    SPORTS = "sports"
    SCIENCE = "science"
    HEALTH = "health"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        if isinstance(value, Category):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown category '{value}'. Allowed: {[c.value for c in cls]}"
            ) from None


CATEGORY_LABELS: Dict[Category, str] = {
    Category.GENERAL: "General",
    Category.BUSINESS: "Business",
    Category.TECHNOLOGY: "Technology",
    Category.ENTERTAINMENT: "Entertainment",
    Category.SPORTS: "Sports",
    Category.SCIENCE: "Science",
    Category.HEALTH: "Health",
}


@dataclass(slots=True, frozen=True)
class Article:
    """A news item in the one shape every source is normalized into."""

    title: str
    link: str
    description: str
    published_at: datetime
    source_name: str
    image_url: Optional[str] = None
    category: Optional[Category] = None
    content: str = field(default="", repr=False)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "publishedAt": self.published_at.isoformat(),
            "sourceName": self.source_name,
            "imageUrl": self.image_url,
            "category": self.category.value if self.category else None,
        }
