"""
Application error taxonomy.

Services raise these; the API boundary (apps.core.errors) maps each one to an
HTTP status and a stable error code. Nothing here is retried automatically.
"""

from typing import Any


class AppError(Exception):
    """Base exception for errors that reach the API boundary."""

    status_code = 500
    code = "SERVER_ERROR"
    default_message = "Server Error"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        self.details = details


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class DuplicateError(AppError):
    """An active record with the same normalized value already exists in the tenant."""

    status_code = 400
    code = "DUPLICATE_FIELD"
    default_message = "Record already exists"

    def __init__(self, message: str | None = None, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field


class InvalidReferenceError(AppError):
    """A referenced record is missing, deleted, or belongs to another tenant."""

    status_code = 400
    code = "INVALID_REFERENCE"
    default_message = "Referenced record not found"

    def __init__(self, message: str | None = None, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field


class ImmutableFieldError(AppError):
    """Attempt to change the tenant, id or provenance of an existing record."""

    status_code = 400
    code = "IMMUTABLE_FIELD"
    default_message = "Field cannot be changed"

    def __init__(self, message: str | None = None, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field


class ScopeViolationError(AppError):
    """
    A query tried to bypass tenant or soft-delete scoping.

    This is a programming error, not a client error: the boundary logs it with
    full context and returns a generic 500.
    """

    status_code = 500
    code = "SERVER_ERROR"
    default_message = "Query attempted to bypass tenant or soft-delete scope"


class NotFoundError(AppError):
    """Record does not exist or is not visible under the caller's scope."""

    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class AuthError(AppError):
    """Token missing, invalid, expired, or tied to an unusable account."""

    status_code = 401
    code = "INVALID_TOKEN"
    default_message = "Not authorized to access this route"


class PermissionDeniedError(AuthError):
    """Caller's role set does not intersect the roles the operation accepts."""

    status_code = 403
    code = "FORBIDDEN"
    default_message = "Not authorized to perform this action"
