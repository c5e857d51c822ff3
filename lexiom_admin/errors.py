"""Error taxonomy shared by every route.

Each class carries its HTTP status and a stable machine-readable ``error`` code.
The handlers registered in :mod:`lexiom_admin.main` render them as::

    {"error": "<code>", "message": "<text>", ...extra}
"""
from typing import Any, Dict, Optional


class AdminAPIError(Exception):
    """Base class for errors that map to a client-visible response."""

    status_code: int = 500
    error: str = "internal_server_error"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.message
        self.extra = extra or {}
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message, **self.extra}


class ValidationError(AdminAPIError):
    status_code = 400
    error = "validation_error"
    message = "Invalid request"


class MFARequiredError(ValidationError):
    """Correct password, but the identity has MFA enabled and no code was sent."""

    error = "mfa_required"
    message = "MFA code required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, extra={"mfaRequired": True})


class AuthenticationError(AdminAPIError):
    status_code = 401
    error = "authentication_failed"
    message = "Invalid credentials"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AdminAPIError):
    status_code = 403
    error = "insufficient_permissions"
    message = "Insufficient permissions"


class NotFoundError(AdminAPIError):
    status_code = 404
    error = "not_found"
    message = "Resource not found"


class LockedError(AdminAPIError):
    status_code = 423
    error = "account_locked"
    message = "Account locked"


class RateLimitedError(AdminAPIError):
    status_code = 429
    error = "rate_limit_exceeded"
    message = "Too many requests. Please try again later."


class InternalError(AdminAPIError):
    status_code = 500
    error = "internal_server_error"
    message = "An unexpected error occurred. Please contact support."
