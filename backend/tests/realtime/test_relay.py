"""
Tests for the real-time relay.

Events are handed to the backend only after the surrounding transaction
commits; pytest-django's django_capture_on_commit_callbacks runs those hooks.
"""

import uuid

import pytest
from django.db import transaction
from django.test import override_settings

from apps.core.middleware import set_correlation_id
from apps.realtime import relay
from apps.realtime.relay import LocalRelayBackend, MemoryRelayBackend


@pytest.mark.django_db
class TestEmit:
    def test_delivered_after_commit(self, relay_events, django_capture_on_commit_callbacks) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            with transaction.atomic():
                relay.emit("task:created", "c-1", [relay.company_room("c-1")], {"id": "t-1"})
                assert relay_events.events == []

        assert len(relay_events.events) == 1
        event = relay_events.events[0]
        assert event.event_type == "task:created"
        assert event.tenant_id == "c-1"
        assert event.room_ids == ("company:c-1",)
        assert event.payload == {"id": "t-1"}

    def test_not_delivered_without_commit(self, relay_events, django_capture_on_commit_callbacks) -> None:
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            relay.emit("task:created", "c-1", ["company:c-1"])

        assert len(callbacks) == 1
        assert relay_events.events == []

    def test_rolled_back_mutation_sends_nothing(self, relay_events, django_capture_on_commit_callbacks) -> None:
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    relay.emit("task:created", "c-1", ["company:c-1"])
                    raise RuntimeError("validation failed late")

        assert callbacks == []
        assert relay_events.events == []

    def test_rooms_are_deduplicated_in_order(self, relay_events, django_capture_on_commit_callbacks) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            relay.emit("x", "c-1", ["project:p", "company:c-1", "project:p"])

        assert relay_events.events[0].room_ids == ("project:p", "company:c-1")

    def test_correlation_id_is_attached(self, relay_events, django_capture_on_commit_callbacks) -> None:
        correlation_id = uuid.uuid4()
        set_correlation_id(correlation_id)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                relay.emit("x", "c-1", ["company:c-1"])
        finally:
            set_correlation_id(None)

        assert relay_events.events[0].correlation_id == str(correlation_id)

    def test_delivery_failure_is_logged_not_raised(
        self, relay_events, django_capture_on_commit_callbacks, monkeypatch, caplog
    ) -> None:
        def broken(event):
            raise ConnectionError("socket gone")

        monkeypatch.setattr(relay_events, "deliver", broken)

        with django_capture_on_commit_callbacks(execute=True):
            relay.emit("x", "c-1", ["company:c-1"])

        assert "relay_delivery_failed" in caplog.text


class TestBackends:
    def test_memory_backend_filters_by_type(self) -> None:
        backend = MemoryRelayBackend()
        for event_type in ("a", "b", "a"):
            backend.deliver(relay.RelayEvent(event_type=event_type, tenant_id="t", room_ids=()))

        assert len(backend.of_type("a")) == 2
        backend.clear()
        assert backend.events == []

    @override_settings(REALTIME_BACKEND="local")
    def test_backend_chosen_from_settings(self) -> None:
        relay.reset_backend()

        assert isinstance(relay.get_backend(), LocalRelayBackend)
        assert relay.get_backend() is relay.get_backend()

    @override_settings(REALTIME_BACKEND="carrier-pigeon")
    def test_unknown_backend(self) -> None:
        relay.reset_backend()

        with pytest.raises(ValueError, match="carrier-pigeon"):
            relay.get_backend()

    def test_room_names(self) -> None:
        assert relay.company_room("c") == "company:c"
        assert relay.project_room("p") == "project:p"
        assert relay.user_room("u") == "user:u"
