"""Domain events for the Orders bounded context.

Payloads carry plain values only; they are stored as JSON in the outbox.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    order_number: str = ""
    user_id: Optional[int] = None
    total: str = "0.00"


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    order_number: str = ""
    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    order_number: str = ""
    old_status: str = ""


@dataclass(frozen=True)
class OrderDelivered(DomainEvent):
    order_number: str = ""
    payment_status: str = ""


@dataclass(frozen=True)
class OrderDeleted(DomainEvent):
    order_number: str = ""
