"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs: atomic
creation with items, locked reads, the conditional status write, status
history, and the read paths of the query surface.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem snapshots and OrderStatusHistory
    records.  Soft-deleted orders are invisible to every read method.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items.

        ``data`` carries the order fields plus ``items``: a list of dicts
        with ``product_id``, ``name``, ``image``, ``unit_price``,
        ``quantity``, ``size`` and ``color``.
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order under a row lock (inside a transaction)."""

    @abstractmethod
    def compare_and_set_status(self, order: Order, new_status: str, **fields: Any) -> bool:
        """Write *new_status* (and *fields*) only if the stored status still
        equals ``order.status``; ``False`` when another writer got there first.
        """

    @abstractmethod
    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def delete(self, order: Order) -> None:
        """Soft-delete an order (flushing its pending domain events)."""

    @abstractmethod
    def for_user(self, user_id: int) -> QuerySet:
        """The user's live orders, newest first."""

    @abstractmethod
    def all(self) -> QuerySet:
        """Every live order, newest first."""
