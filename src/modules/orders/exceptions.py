"""Order domain exceptions.

Raised by the Service Layer when business rules are violated; the API
exception handler turns them into error responses.
"""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import Conflict, DomainError, NotFound


class OrderNotFound(NotFound):
    """The order does not exist, was deleted, or belongs to someone else."""

    default_code = "order_not_found"
    default_detail = "Order not found."


class IllegalTransition(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "illegal_transition"

    def __init__(self, current: str, attempted: str) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(f"Cannot change order status from {current} to {attempted}.")


class InvalidStatus(DomainError):
    """Unknown order status value."""

    default_code = "invalid_status"

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid order status: {value!r}.")


class OrderConflict(Conflict):
    """The order changed between read and write."""

    default_code = "order_conflict"
    default_detail = "Order was modified concurrently, please retry."
