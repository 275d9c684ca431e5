"""Django ORM implementation of the Order repository.

Status changes use a conditional ``UPDATE ... WHERE status = <old>`` on top
of the ``select_for_update`` row lock taken by the service, so a stale
read can never overwrite a newer status.

Domain events collected on the aggregate are written to the transactional
outbox by ``save`` and ``delete``, in the caller's transaction.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.core.retry import retry_on_transient_errors
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        fields = dict(data)
        items = fields.pop("items")
        order = Order(**fields)
        order.save()

        for item_data in items:
            OrderItem(order=order, **item_data).save()

        logger.info("order.persisted", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _live(self):
        return Order.objects.alive().prefetch_related("items", "status_history")

    @retry_on_transient_errors()
    def get_by_id(self, id: str) -> Optional[Order]:
        """Live order with items and history; ``None`` for missing or invalid IDs."""
        try:
            return self._live().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return (
                Order.objects.alive()
                .select_for_update()
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def for_user(self, user_id: int):
        return self._live().filter(user_id=user_id).order_by("-created_at", "-id")

    def all(self):
        return self._live().order_by("-created_at", "-id")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def compare_and_set_status(self, order: Order, new_status: str, **fields: Any) -> bool:
        updated = Order.objects.filter(id=order.id, status=order.status).update(
            status=new_status, updated_at=timezone.now(), **fields
        )
        if not updated:
            return False
        order.status = new_status
        for name, value in fields.items():
            setattr(order, name, value)
        return True

    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status,
            user_id=user_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and flush its domain events to the outbox."""
        entity.save()
        self._flush_events(entity)
        return entity

    @transaction.atomic
    def delete(self, order: Order) -> None:
        order.delete()
        self._flush_events(order)
        logger.info("order.soft_deleted", order_id=str(order.id))

    def _flush_events(self, entity: Order) -> None:
        events = entity.domain_events
        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=_serialize_event_payload(event),
                topic=OUTBOX_TOPIC,
            )
        entity.clear_domain_events()

        if events and settings.OUTBOX_DISPATCH_ON_COMMIT:
            from modules.core.tasks import publish_outbox_events

            transaction.on_commit(publish_outbox_events.delay)
        logger.debug("order.events_flushed", order_id=str(entity.id), event_count=len(events))


def _serialize_event_payload(event: Any) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, list):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
