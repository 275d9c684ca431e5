from __future__ import annotations

import uuid
from unittest.mock import patch

import pytest

from modules.orders.events import OrderCancelled, OrderCreated, OrderDelivered
from modules.orders.handlers import order_cancelled_handler, order_created_handler
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit


def test_handlers_are_subscribed_on_startup():
    assert event_bus.publish(OrderCreated(aggregate_id=uuid.uuid4())) == 1
    assert event_bus.publish(OrderDelivered(aggregate_id=uuid.uuid4())) == 1


def test_created_handler_logs_order_number():
    event = OrderCreated(aggregate_id=uuid.uuid4(), order_number="RC250700009", total="2250.00")

    with patch("modules.orders.handlers.logger") as logger:
        order_created_handler.handle(event)

    logger.info.assert_called_once_with(
        "order.event.created",
        order_id=str(event.aggregate_id),
        order_number="RC250700009",
        total="2250.00",
    )


def test_cancelled_handler_logs_previous_status():
    event = OrderCancelled(aggregate_id=uuid.uuid4(), old_status="confirmed")

    with patch("modules.orders.handlers.logger") as logger:
        order_cancelled_handler.handle(event)

    assert logger.info.call_args.kwargs["old_status"] == "confirmed"
