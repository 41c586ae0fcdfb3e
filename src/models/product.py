"""
Product data model.

Represents a catalog entry with its denormalized review scores.
"""

from dataclasses import dataclass
from typing import Optional

import config.settings as settings


@dataclass
class Product:
    """
    A product in the catalog.
    Scores are derived from reviews and recomputed by the scoring engine.
    """
    id: int
    sku: str  # Unique, compared case-insensitively
    name: str
    brand: str = ""
    category: str = ""
    description: str = ""
    price: float = 0.0
    avg_expert_score: Optional[float] = None  # None until an expert review exists
    avg_user_score: Optional[float] = None  # None until a user review exists

    def __post_init__(self):
        # Validate price
        if self.price < 0:
            raise ValueError(f"Invalid price: {self.price}. Must be >= 0")

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """Create Product from JSON dict."""
        return cls(
            id=int(data["id"]),
            sku=data["sku"],
            name=data["name"],
            brand=data.get("brand", ""),
            category=data.get("category", ""),
            description=data.get("description", ""),
            price=float(data.get("price", 0.0)),
            avg_expert_score=data.get("avg_expert_score"),
            avg_user_score=data.get("avg_user_score")
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "brand": self.brand,
            "category": self.category,
            "description": self.description,
            "price": self.price,
            "avg_expert_score": self.avg_expert_score,
            "avg_user_score": self.avg_user_score
        }

    def __str__(self) -> str:
        return (
            f"[#{self.id}] {self.sku} | {self.name} | {self.brand} | {self.category} | "
            f"{self.price:.2f} {settings.CURRENCY} | "
            f"Expert {_fmt_score(self.avg_expert_score)} | User {_fmt_score(self.avg_user_score)}"
        )


def _fmt_score(score: Optional[float]) -> str:
    return "n/a" if score is None else f"{score:.1f}"
