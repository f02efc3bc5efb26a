"""Errors raised by workspace operations."""


class InkwellError(Exception):
    """Base exception for document workspace operations."""


class NotFoundError(InkwellError):
    """Raised when no physical path resolves for a logical identifier."""


class ConflictError(InkwellError):
    """Raised when a name collides case-insensitively at the destination."""


class InvalidPathError(InkwellError):
    """Raised when a path is malformed or escapes the storage root."""


class StorageError(InkwellError):
    """Raised when the underlying filesystem fails."""
