"""Errors raised by the directory services.

Routers translate these into JSON error responses using ``status_code``.
"""
from typing import List, Optional


class DirectoryError(Exception):
    """Base class for directory service errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(DirectoryError):
    """Submission payload failed field validation."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message)


class InvalidInput(DirectoryError):
    status_code = 400
    default_message = "Invalid input"


class RateLimited(DirectoryError):
    """Client submitted again inside the cooldown window."""

    status_code = 429
    default_message = "Please wait 5 minutes between submissions"

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message)


class Unauthorized(DirectoryError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(DirectoryError):
    status_code = 404
    default_message = "Not found"


class AlreadyReviewed(DirectoryError):
    """Submission has already been approved or rejected."""

    status_code = 409
    default_message = "Submission has already been reviewed"


class PersistenceFailure(DirectoryError):
    """Backend unreachable, not configured, or rejected a write."""

    status_code = 500
    default_message = "Failed to save changes"


class Misconfigured(DirectoryError):
    """A required secret or connection setting is absent."""

    status_code = 500
    default_message = "Server is not configured for this operation"
