"""Error kinds reported to callers of the record store services."""

from __future__ import annotations


class BiteWaveError(Exception):
    """Base for every recoverable, user-facing failure."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(BiteWaveError):
    """Raised for empty, malformed or non-numeric input."""


class DuplicateUsername(BiteWaveError):
    """Raised when a username is already taken."""


class NotFound(BiteWaveError):
    """Raised for a stale reference to a user, item, order, bill or statement."""


class ProtectedAccount(BiteWaveError):
    """Raised when deleting the sentinel administrator."""


class InvalidCredentials(BiteWaveError):
    """Raised when a login does not match a stored account."""


class EmptyOrder(BiteWaveError):
    """Raised when billing an order without lines."""


class AlreadyBilled(BiteWaveError):
    """Raised when a billed order is billed again or modified."""


class ArtifactWriteFailed(BiteWaveError):
    """Raised when a bill statement cannot be written."""


class PersistenceFailure(BiteWaveError):
    """Raised when durable storage cannot be read or written."""
