"""
Custom Exceptions for the OPC Diary data store.

Provides specific exception types for the failure modes of the local
persistence model. None of them is fatal: callers degrade to an empty or
default state and, where the user can act on it, a transient notice.
"""


class DiaryError(Exception):
    """Base exception for all diary store errors."""
    pass


# =============================================================================
# Storage Exceptions
# =============================================================================

class StorageError(DiaryError):
    """Raised when the key-value store rejects an operation."""
    pass


class QuotaExceededError(StorageError):
    """Raised when a write would exceed the store's capacity."""

    def __init__(self, key: str, size: int = None, quota: int = None):
        self.key = key
        self.size = size
        self.quota = quota
        msg = f"Storage quota exceeded while writing '{key}'"
        if size is not None and quota is not None:
            msg += f" ({size} bytes, quota {quota} bytes)"
        super().__init__(msg)


class StorageUnavailableError(StorageError):
    """Raised when the backing store cannot be reached."""

    def __init__(self, backend: str, reason: str = None):
        self.backend = backend
        self.reason = reason
        msg = f"Storage backend '{backend}' is unavailable"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class DecodeError(DiaryError):
    """Raised when a stored value cannot be decoded into its entity family."""

    def __init__(self, key: str, reason: str = None):
        self.key = key
        self.reason = reason
        msg = f"Failed to decode value stored under '{key}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


# =============================================================================
# Authentication Exceptions
# =============================================================================

class AuthenticationError(DiaryError):
    """Base exception for authentication errors."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when a login is rejected, whatever the reason."""

    def __init__(self):
        super().__init__("Invalid company name or password")


class PermissionDeniedError(AuthenticationError):
    """Raised when the acting identity may not perform an operation."""

    def __init__(self, action: str, identity: str = None):
        self.action = action
        self.identity = identity
        msg = f"Not allowed to {action}"
        if identity:
            msg += f" as '{identity}'"
        super().__init__(msg)


# =============================================================================
# Lookup Exceptions
# =============================================================================

class NotFoundError(DiaryError):
    """Raised when a referenced record no longer exists."""

    resource = "record"

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"{self.resource.capitalize()} not found: {identifier}")


class UserNotFoundError(NotFoundError):
    resource = "user"


class ProjectNotFoundError(NotFoundError):
    resource = "project"


class EntryNotFoundError(NotFoundError):
    resource = "diary entry"


class PostNotFoundError(NotFoundError):
    resource = "forum post"


# =============================================================================
# Input Exceptions
# =============================================================================

class InvalidInputError(DiaryError):
    """Raised when user input cannot produce a valid record."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


__all__ = [
    "DiaryError",
    "StorageError",
    "QuotaExceededError",
    "StorageUnavailableError",
    "DecodeError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "PermissionDeniedError",
    "NotFoundError",
    "UserNotFoundError",
    "ProjectNotFoundError",
    "EntryNotFoundError",
    "PostNotFoundError",
    "InvalidInputError",
]
