"""
Error kinds raised by ExpertCart services.

Every error is local and recoverable: the interactive shell reports it
and keeps the session running.
"""


class CatalogError(Exception):
    """Base class for all ExpertCart errors."""


class AuthorizationError(CatalogError, PermissionError):
    """Acting user is not logged in or lacks the required role."""


class ValidationError(CatalogError, ValueError):
    """Input is malformed or out of range (score, price, role label...)."""


class ConflictError(CatalogError, ValueError):
    """Uniqueness rule violated (username, SKU, one review per type)."""


class NotFoundError(CatalogError, LookupError):
    """Referenced entity does not exist."""


class StorageError(CatalogError, OSError):
    """Snapshot or bill could not be read or written."""
