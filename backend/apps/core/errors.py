"""
API error boundary.

Maps the application error taxonomy, ninja request validation errors and
HttpError to the single error envelope:

    {"success": false,
     "error": {"code", "message", "details"?, "timestamp", "requestId"}}

Stack traces are logged for 5xx responses and never returned to clients.
"""

from typing import Any

from django.http import HttpRequest, HttpResponse
from django.utils import timezone
from ninja import NinjaAPI
from ninja.errors import AuthenticationError, HttpError
from ninja.errors import ValidationError as NinjaValidationError

from apps.core.exceptions import AppError
from apps.core.logging import get_logger
from apps.core.middleware import get_correlation_id

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    400: "VALIDATION_ERROR",
    401: "NO_TOKEN",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def error_body(
    request: HttpRequest,
    code: str,
    message: str,
    details: Any = None,
) -> dict[str, Any]:
    correlation_id = get_correlation_id() or getattr(request, "correlation_id", None)
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    error["timestamp"] = timezone.now().isoformat()
    error["requestId"] = str(correlation_id) if correlation_id else None
    return {"success": False, "error": error}


def _principal_id(request: HttpRequest) -> str | None:
    user = getattr(getattr(request, "auth", None), "user", None)
    return str(user.id) if user is not None else None


def _details_for(exc: AppError) -> dict[str, Any] | None:
    details = dict(exc.details or {})
    field = getattr(exc, "field", None)
    if field:
        details.setdefault("field", field)
    return details or None


def register_exception_handlers(api: NinjaAPI) -> None:
    """Install the envelope-producing handlers on the API instance."""

    @api.exception_handler(AppError)
    def handle_app_error(request: HttpRequest, exc: AppError) -> HttpResponse:
        if exc.status_code >= 500:
            # Internal detail (e.g. a scope violation) stays in the logs
            logger.exception(
                "request_failed",
                error_class=type(exc).__name__,
                error_message=exc.message,
                details=exc.details,
                user_id=_principal_id(request),
            )
            body = error_body(request, exc.code, "Server Error")
        else:
            logger.warning(
                "request_rejected",
                error_code=exc.code,
                error_message=exc.message,
                status=exc.status_code,
                user_id=_principal_id(request),
            )
            body = error_body(request, exc.code, exc.message, _details_for(exc))
        return api.create_response(request, body, status=exc.status_code)

    @api.exception_handler(NinjaValidationError)
    def handle_request_validation(request: HttpRequest, exc: NinjaValidationError) -> HttpResponse:
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or None,
                "message": err.get("msg", ""),
            }
            for err in exc.errors
        ]
        logger.warning("request_validation_failed", errors=errors, user_id=_principal_id(request))
        message = errors[0]["message"] if errors else "Invalid input"
        body = error_body(request, "VALIDATION_ERROR", message, {"errors": errors})
        return api.create_response(request, body, status=400)

    @api.exception_handler(AuthenticationError)
    def handle_authentication_error(request: HttpRequest, exc: AuthenticationError) -> HttpResponse:
        body = error_body(request, "NO_TOKEN", "Not authorized, no token provided")
        return api.create_response(request, body, status=401)

    @api.exception_handler(HttpError)
    def handle_http_error(request: HttpRequest, exc: HttpError) -> HttpResponse:
        code = HTTP_ERROR_CODES.get(exc.status_code, "SERVER_ERROR")
        logger.warning("request_rejected", error_code=code, status=exc.status_code)
        body = error_body(request, code, str(exc))
        return api.create_response(request, body, status=exc.status_code)

    @api.exception_handler(Exception)
    def handle_unexpected(request: HttpRequest, exc: Exception) -> HttpResponse:
        logger.exception(
            "request_failed",
            error_class=type(exc).__name__,
            user_id=_principal_id(request),
        )
        body = error_body(request, "SERVER_ERROR", "Server Error")
        return api.create_response(request, body, status=500)
