"""
Order data model.

A purchase where repeated product ids encode quantity.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

import config.settings as settings
from src.utils.clock import utc_now, to_iso, from_iso


@dataclass
class Order:
    id: int
    user_id: int
    product_ids: List[int] = field(default_factory=list)  # Duplicates = quantity
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        """Create Order from JSON dict."""
        return cls(
            id=int(data["id"]),
            user_id=int(data["user_id"]),
            product_ids=[int(pid) for pid in data.get("product_ids", [])],
            subtotal=float(data.get("subtotal", 0.0)),
            tax=float(data.get("tax", 0.0)),
            total=float(data.get("total", 0.0)),
            created_at=from_iso(data.get("created_at")) or utc_now()
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_ids": list(self.product_ids),
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "created_at": to_iso(self.created_at)
        }

    def __str__(self) -> str:
        currency = settings.CURRENCY
        return (
            f"Order #{self.id} by User {self.user_id} on {to_iso(self.created_at)}\n"
            f"Products: {self.product_ids}\n"
            f"Subtotal: {self.subtotal:.2f} {currency}, Tax: {self.tax:.2f} {currency}, "
            f"Total: {self.total:.2f} {currency}"
        )
