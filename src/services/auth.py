"""
Authentication and role checks.

Signup, login/logout, and capability enforcement for the current session.
"""

import logging
from typing import Optional

import config.settings as settings
from src.errors import AuthorizationError, ConflictError, ValidationError
from src.models.user import Capability, Role, User
from src.registry.repository import Repository

logger = logging.getLogger(__name__)


def parse_role(label: str) -> Role:
    """
    Parse a role label (case-insensitive).

    Raises:
        ValidationError: If the label is not ADMIN, EXPERT or USER
    """
    try:
        return Role(label.strip().upper())
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid role: {label!r}. Must be ADMIN, EXPERT or USER")


class AuthService:
    """
    Tracks who is logged in and enforces role capabilities.
    """

    def __init__(self, repository: Repository):
        self.repository = repository
        self.current: Optional[User] = None

    def signup(
        self,
        username: str,
        password: str,
        role: Role = Role.USER,
        expertise_domain: Optional[str] = None
    ) -> User:
        """
        Register a new account.

        Experts start with EXPERT_TRUST and keep their expertise domain;
        everyone else starts with DEFAULT_TRUST and no domain.

        Raises:
            ValidationError: Blank username or unknown role
            ConflictError: Username taken (case-insensitive)
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username must not be empty")

        role = parse_role(role)
        with self.repository.lock:
            if self.repository.find_user_by_username(username) is not None:
                raise ConflictError(f"Username already exists: {username}")

            is_expert = role == Role.EXPERT
            user = User(
                id=self.repository.next_id("user"),
                username=username,
                password=password,
                role=role,
                expertise_trust=settings.EXPERT_TRUST if is_expert else settings.DEFAULT_TRUST,
                expertise_domain=expertise_domain if is_expert else None
            )
            self.repository.add_user(user)

        logger.info(f"Registered user #{user.id} '{user.username}' as {role.value}")
        return user

    def login(self, username: str, password: str) -> User:
        """
        Log in with a case-insensitive username and exact password.
        A failed attempt logs out whoever was logged in.

        Raises:
            AuthorizationError: Unknown username or wrong password
        """
        user = self.repository.find_user_by_username(username or "")
        if user is None or user.password != password:
            self.current = None
            logger.warning(f"Failed login for '{username}'")
            raise AuthorizationError("Login failed")

        self.current = user
        logger.info(f"User #{user.id} '{user.username}' logged in")
        return user

    def logout(self) -> None:
        if self.current is not None:
            logger.info(f"User #{self.current.id} '{self.current.username}' logged out")
        self.current = None

    def require_login(self) -> User:
        """Return the current user, or raise AuthorizationError."""
        if self.current is None:
            raise AuthorizationError("Login first")
        return self.current

    def require_capability(self, capability: Capability) -> User:
        """Return the current user if their role allows the action."""
        user = self.require_login()
        if not user.can(capability):
            raise AuthorizationError(
                f"Role {user.role.value} is not allowed to {capability.value.replace('_', ' ')}"
            )
        return user

    def refresh(self) -> None:
        """Re-resolve the current user after the repository was replaced."""
        if self.current is not None:
            self.current = self.repository.get_user(self.current.id)
