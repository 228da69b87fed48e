"""
Core middleware.
"""

import time
from collections.abc import Callable
from contextvars import ContextVar
from uuid import UUID, uuid4

from django.http import HttpRequest, HttpResponse

from apps.core.logging import bind_contextvars, clear_contextvars, get_logger
from apps.core.utils import get_client_ip

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

_correlation_id: ContextVar[UUID | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> UUID | None:
    """Correlation ID of the request being handled, if any."""
    return _correlation_id.get()


def set_correlation_id(value: UUID | None) -> None:
    _correlation_id.set(value)


def _parse_correlation_id(raw: str | None) -> UUID:
    if raw:
        try:
            return UUID(raw)
        except ValueError:
            pass
    return uuid4()


class CorrelationIdMiddleware:
    """
    Assigns every request a correlation ID and binds request logging context.

    Reuses a valid X-Correlation-ID header or generates a new UUID, exposes it
    as request.correlation_id, binds it with the client ip and user-agent to
    structlog contextvars, echoes it on the response and clears all request
    context once the response is produced.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = _parse_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.correlation_id = correlation_id  # type: ignore[attr-defined]
        set_correlation_id(correlation_id)

        bind_contextvars(
            correlation_id=str(correlation_id),
            **{
                "http.method": request.method,
                "http.url_details.path": request.path,
                "request.ip_address": get_client_ip(request),
                "request.user_agent": request.headers.get("User-Agent", ""),
            },
        )

        started = time.monotonic()
        try:
            response = self.get_response(request)
            response[CORRELATION_ID_HEADER] = str(correlation_id)
            logger.info(
                "request_finished",
                duration_ms=(time.monotonic() - started) * 1000,
                **{"http.status_code": response.status_code},
            )
            return response
        finally:
            set_correlation_id(None)
            clear_contextvars()
