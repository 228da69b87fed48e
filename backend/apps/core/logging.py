"""
Structured logging configuration using structlog.

Every module logs snake_case event names with keyword fields:

    from apps.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("project_created", project_id=str(project.id))

Request-scoped fields are bound by CorrelationIdMiddleware and the bearer
auth class, using Datadog standard attribute names:
    - trace_id: request correlation ID (X-Correlation-ID)
    - usr.id: authenticated user
    - company.id: tenant of the authenticated user
    - http.method / http.url_details.path: request line
    - request.ip_address / request.user_agent: client
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor


def _add_trace_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename correlation_id to trace_id and force it to a string."""
    if "correlation_id" in event_dict:
        event_dict["trace_id"] = str(event_dict.pop("correlation_id"))
    return event_dict


def _convert_duration_to_nanoseconds(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Convert duration_ms to duration in nanoseconds."""
    if "duration_ms" in event_dict:
        duration_ms = event_dict.pop("duration_ms")
        event_dict["duration"] = int(duration_ms * 1_000_000)
    return event_dict


def configure_logging(json_format: bool = True, log_level: str = "INFO") -> None:
    """
    Configure structlog on top of stdlib logging.

    Args:
        json_format: JSON lines (production) or colored console output (development).
        log_level: Minimum level for the root logger.
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_trace_id,
        _convert_duration_to_nanoseconds,
    ]

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
        pre_chain.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, typically named after the calling module."""
    return structlog.get_logger(name)


def bind_contextvars(**kwargs: Any) -> None:
    """
    Bind fields to every log line emitted in the current request context.

    Dotted keys need dict unpacking:
        bind_contextvars(**{"usr.id": str(user.id)})
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def get_contextvars() -> dict[str, Any]:
    """Fields currently bound to the request context."""
    return structlog.contextvars.get_contextvars()


def clear_contextvars() -> None:
    """Drop all request-bound fields; called when a request finishes."""
    structlog.contextvars.clear_contextvars()
