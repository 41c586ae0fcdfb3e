"""
User data model.

Accounts, roles, and the role capability table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import config.settings as settings


class Role(str, Enum):
    ADMIN = "ADMIN"
    EXPERT = "EXPERT"
    USER = "USER"


class Capability(str, Enum):
    """Actions gated by role."""
    MANAGE_CATALOG = "manage_catalog"
    POST_EXPERT_REVIEW = "post_expert_review"
    POST_USER_REVIEW = "post_user_review"
    PURCHASE = "purchase"
    VIEW_SALES_REPORT = "view_sales_report"


ROLE_CAPABILITIES = {
    Role.ADMIN: frozenset({
        Capability.MANAGE_CATALOG,
        Capability.VIEW_SALES_REPORT,
        Capability.POST_USER_REVIEW,
        Capability.PURCHASE,
    }),
    Role.EXPERT: frozenset({
        Capability.POST_EXPERT_REVIEW,
        Capability.POST_USER_REVIEW,
        Capability.PURCHASE,
    }),
    Role.USER: frozenset({
        Capability.POST_USER_REVIEW,
        Capability.PURCHASE,
    }),
}


def has_capability(role: Role, capability: Capability) -> bool:
    """Return True if the role is allowed to perform the action."""
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


@dataclass
class User:
    """
    A registered account.
    expertise_trust weights this user's expert reviews; expertise_domain
    is only meaningful for experts.
    """
    id: int
    username: str  # Unique, compared case-insensitively
    password: str  # Opaque
    role: Role = Role.USER
    expertise_trust: float = settings.DEFAULT_TRUST
    expertise_domain: Optional[str] = None

    def __post_init__(self):
        # Accept raw labels coming from snapshots
        if not isinstance(self.role, Role):
            self.role = Role(self.role)

    def can(self, capability: Capability) -> bool:
        return has_capability(self.role, capability)

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        """Create User from JSON dict."""
        return cls(
            id=int(data["id"]),
            username=data["username"],
            password=data["password"],
            role=Role(data.get("role", Role.USER.value)),
            expertise_trust=float(data.get("expertise_trust", settings.DEFAULT_TRUST)),
            expertise_domain=data.get("expertise_domain")
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "role": self.role.value,
            "expertise_trust": self.expertise_trust,
            "expertise_domain": self.expertise_domain
        }

    def __str__(self) -> str:
        return (
            f"[#{self.id}] {self.username} ({self.role.value}) "
            f"trust={self.expertise_trust:.2f} domain={self.expertise_domain}"
        )
