"""
Service-layer exceptions mapped to HTTP responses.

Every error carries the message returned to the caller and the status code
the API layer answers with. Messages never say which of identifier or
password was wrong.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for errors surfaced to API callers as ``{"message": ...}``."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    """Malformed input (400). Raised before any side effect."""

    status_code = 400


class AuthenticationError(ServiceError):
    """Bad credentials or a missing, invalid or revoked token (401)."""

    status_code = 401


class ConflictError(ServiceError):
    """A unique field is already taken at registration (400)."""

    status_code = 400

    def __init__(self, field: str):
        super().__init__(f"Failed to register, {field} already used")
        self.field = field


class NotFoundError(ServiceError):
    """The authenticated subject no longer exists (404)."""

    status_code = 404


class InternalError(ServiceError):
    """Persistence, signing or credential verifier failure (500)."""

    status_code = 500


UNAUTHORIZED = "Unauthorized"
