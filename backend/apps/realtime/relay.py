"""
Real-time relay - informs connected clients about committed state changes.

Events are addressed to rooms:
    company:<id>  everyone in a tenant
    project:<id>  members following a project
    user:<id>     a single user

Delivery is scheduled with transaction.on_commit, so nothing is sent for a
rolled-back mutation and each successful mutation is sent at most once.
Delivery failures are logged and never propagate to the caller.

Backends (REALTIME_BACKEND setting):
    local   Logs each event (default)
    memory  Keeps events in an in-process list (tests, development tooling)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from django.db import transaction

from apps.core.logging import get_logger
from apps.core.middleware import get_correlation_id

logger = get_logger(__name__)


def company_room(company_id: UUID | str) -> str:
    return f"company:{company_id}"


def project_room(project_id: UUID | str) -> str:
    return f"project:{project_id}"


def user_room(user_id: UUID | str) -> str:
    return f"user:{user_id}"


@dataclass(frozen=True)
class RelayEvent:
    event_type: str
    tenant_id: str
    room_ids: tuple[str, ...]
    payload: dict[str, Any] = field(default_factory=dict)
    correlation_id: str | None = None


class RelayBackend(ABC):
    """Abstract base class for relay delivery backends."""

    @abstractmethod
    def deliver(self, event: RelayEvent) -> None:
        """Hand the event to the transport. May raise; the relay logs failures."""


class LocalRelayBackend(RelayBackend):
    """Logs events; used where no socket transport is attached."""

    def deliver(self, event: RelayEvent) -> None:
        logger.info(
            "relay_event_delivered",
            event_type=event.event_type,
            tenant_id=event.tenant_id,
            room_ids=list(event.room_ids),
            correlation_id=event.correlation_id,
            backend="local",
        )


class MemoryRelayBackend(RelayBackend):
    """Collects delivered events in memory."""

    def __init__(self) -> None:
        self.events: list[RelayEvent] = []

    def deliver(self, event: RelayEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> list[RelayEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def clear(self) -> None:
        self.events.clear()


BACKENDS: dict[str, type[RelayBackend]] = {
    "local": LocalRelayBackend,
    "memory": MemoryRelayBackend,
}

_backend: RelayBackend | None = None


def get_backend() -> RelayBackend:
    """
    Get the configured relay backend.

    The instance is created once per process so the memory backend keeps
    its events between calls.
    """
    global _backend
    if _backend is None:
        from django.conf import settings

        backend_type = getattr(settings, "REALTIME_BACKEND", "local")
        try:
            _backend = BACKENDS[backend_type]()
        except KeyError:
            raise ValueError(f"Unknown REALTIME_BACKEND: {backend_type!r}") from None
    return _backend


def reset_backend() -> None:
    """Forget the cached backend so the next get_backend() re-reads settings."""
    global _backend
    _backend = None


def _deliver(event: RelayEvent) -> None:
    try:
        get_backend().deliver(event)
    except Exception:
        logger.exception(
            "relay_delivery_failed",
            event_type=event.event_type,
            tenant_id=event.tenant_id,
            room_ids=list(event.room_ids),
        )


def emit(
    event_type: str,
    tenant_id: UUID | str,
    room_ids: list[str] | tuple[str, ...],
    payload: dict[str, Any] | None = None,
) -> RelayEvent:
    """
    Schedule an event for delivery once the current transaction commits.

    Outside a transaction the event is delivered immediately.
    """
    correlation_id = get_correlation_id()
    event = RelayEvent(
        event_type=event_type,
        tenant_id=str(tenant_id),
        room_ids=tuple(dict.fromkeys(room_ids)),
        payload=payload or {},
        correlation_id=str(correlation_id) if correlation_id else None,
    )
    transaction.on_commit(lambda: _deliver(event))
    return event
