"""Unit tests for DomainEvent, DomainEventMixin and the in-memory bus."""

from __future__ import annotations

import uuid
from dataclasses import FrozenInstanceError
from unittest.mock import MagicMock

import pytest

from modules.orders.events import OrderCancelled, OrderStatusChanged
from modules.orders.repositories.django_repository import _serialize_event_payload
from shared.domain.events import DomainEvent, DomainEventMixin
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class TestDomainEvent:
    def test_event_name_is_class_name(self):
        event = OrderCancelled(aggregate_id=uuid.uuid4())
        assert event.event_name == "OrderCancelled"

    def test_events_are_immutable(self):
        event = OrderCancelled(aggregate_id=uuid.uuid4())
        with pytest.raises(FrozenInstanceError):
            event.old_status = "pending"  # type: ignore[misc]

    def test_subclasses_register_themselves(self):
        assert DomainEvent.registry["OrderStatusChanged"] is OrderStatusChanged

    def test_rebuilt_from_json_payload(self):
        original = OrderStatusChanged(
            aggregate_id=uuid.uuid4(),
            order_number="RC250100007",
            old_status="pending",
            new_status="confirmed",
        )

        rebuilt = DomainEvent.from_payload(
            "OrderStatusChanged", _serialize_event_payload(original)
        )

        assert rebuilt == original

    def test_unknown_type_raises_lookup_error(self):
        with pytest.raises(LookupError):
            DomainEvent.from_payload("Nope", {"aggregate_id": str(uuid.uuid4())})


class TestDomainEventMixin:
    def test_collects_and_clears_events(self):
        aggregate = DomainEventMixin()
        event = OrderCancelled(aggregate_id=uuid.uuid4())

        aggregate.add_domain_event(event)
        assert aggregate.domain_events == [event]

        aggregate.clear_domain_events()
        assert aggregate.domain_events == []


class TestInMemoryEventBus:
    def test_publish_reaches_subscribers_of_that_type_only(self):
        bus = InMemoryEventBus()
        cancelled_handler = MagicMock()
        changed_handler = MagicMock()
        bus.subscribe(OrderCancelled, cancelled_handler)
        bus.subscribe(OrderStatusChanged, changed_handler)
        event = OrderCancelled(aggregate_id=uuid.uuid4())

        assert bus.publish(event) == 1
        cancelled_handler.handle.assert_called_once_with(event)
        changed_handler.handle.assert_not_called()

    def test_duplicate_subscription_is_ignored(self):
        bus = InMemoryEventBus()
        handler = MagicMock()
        bus.subscribe(OrderCancelled, handler)
        bus.subscribe(OrderCancelled, handler)

        assert bus.publish(OrderCancelled(aggregate_id=uuid.uuid4())) == 1
