"""Asynchronous tasks of the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

MAX_OUTBOX_RETRIES = 5
OUTBOX_BATCH_SIZE = 100


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE) -> dict:
    """Relay pending outbox rows to the in-process event bus.

    Rows are locked with ``SKIP LOCKED`` where the database supports it so
    two workers never deliver the same event.  A handler failure marks the
    row ``FAILED``; it is picked up again until ``MAX_OUTBOX_RETRIES``.
    """
    published = failed = 0
    with transaction.atomic():
        batch = list(
            OutboxEvent.objects.select_for_update(skip_locked=True)
            .filter(
                status__in=[EventStatus.PENDING, EventStatus.FAILED],
                retry_count__lt=MAX_OUTBOX_RETRIES,
            )
            .order_by("created_at")[:batch_size]
        )
        for row in batch:
            try:
                event = DomainEvent.from_payload(row.event_type, row.payload)
                event_bus.publish(event)
            except Exception as exc:  # handler errors must not block the batch
                row.mark_as_failed(str(exc))
                failed += 1
                logger.warning(
                    "outbox.publish_failed",
                    outbox_id=str(row.id),
                    event_type=row.event_type,
                    error=str(exc),
                )
                continue
            row.mark_as_published()
            published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
