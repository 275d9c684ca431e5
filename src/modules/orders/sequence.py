"""Order number allocation.

Format: ``<prefix><YY><MM><sequence>``, e.g. ``RC250700042``.  The sequence
is zero-padded to ``ORDER_NUMBER_PADDING`` digits and grows wider once it
overflows; it never resets.

The counter is advanced with ``UPDATE order_sequences SET value = value + 1``
and read back in the same transaction.  The update takes the row lock, so
no two transactions can observe the same value.  Numbers of rolled-back
checkouts are lost (gaps are fine, duplicates are not).
"""

from __future__ import annotations

from typing import Optional

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.orders.constants import ORDER_SEQUENCE_NAME
from modules.orders.models import OrderSequence

logger = structlog.get_logger(__name__)


class OrderNumberGenerator:
    def __init__(
        self,
        prefix: Optional[str] = None,
        padding: Optional[int] = None,
        sequence_name: str = ORDER_SEQUENCE_NAME,
    ) -> None:
        self.prefix = settings.ORDER_NUMBER_PREFIX if prefix is None else prefix
        self.padding = settings.ORDER_NUMBER_PADDING if padding is None else padding
        self.sequence_name = sequence_name

    @transaction.atomic
    def next_value(self) -> int:
        OrderSequence.objects.get_or_create(name=self.sequence_name)
        OrderSequence.objects.filter(name=self.sequence_name).update(
            value=F("value") + 1
        )
        return (
            OrderSequence.objects.filter(name=self.sequence_name)
            .values_list("value", flat=True)
            .get()
        )

    def format(self, value: int, now=None) -> str:
        now = now or timezone.localtime()
        return f"{self.prefix}{now:%y%m}{value:0{self.padding}d}"

    def next_number(self) -> str:
        """Allocate the next order number (call inside the checkout transaction)."""
        number = self.format(self.next_value())
        logger.info("order.number_allocated", order_number=number)
        return number
