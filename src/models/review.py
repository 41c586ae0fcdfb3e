"""
Review data model.

Represents an expert or user review of a catalog product.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import config.settings as settings
from src.utils.clock import utc_now, to_iso, from_iso


class ReviewType(str, Enum):
    EXPERT = "EXPERT"
    USER = "USER"


@dataclass
class Review:
    """
    A scored review. At most one review per (product, author, type).
    """
    id: int
    product_id: int
    author_id: int
    type: ReviewType
    score: int  # 1-10
    body: str = ""
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        if not isinstance(self.type, ReviewType):
            self.type = ReviewType(self.type)

        # Validate score
        if (
            isinstance(self.score, bool)
            or not isinstance(self.score, int)
            or not (settings.MIN_SCORE <= self.score <= settings.MAX_SCORE)
        ):
            raise ValueError(
                f"Invalid score: {self.score!r}. Must be {settings.MIN_SCORE}-{settings.MAX_SCORE}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "Review":
        """Create Review from JSON dict."""
        return cls(
            id=int(data["id"]),
            product_id=int(data["product_id"]),
            author_id=int(data["author_id"]),
            type=ReviewType(data["type"]),
            score=int(data["score"]),
            body=data.get("body", ""),
            created_at=from_iso(data.get("created_at")) or utc_now()
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "product_id": self.product_id,
            "author_id": self.author_id,
            "type": self.type.value,
            "score": self.score,
            "body": self.body,
            "created_at": to_iso(self.created_at)
        }

    def __str__(self) -> str:
        return (
            f"[#{self.id}] {self.type.value} score={self.score} by user #{self.author_id} "
            f"at {to_iso(self.created_at)}\n{self.body}"
        )
