"""Order, OrderItem, OrderStatusHistory and OrderSequence models.

- ``order_number`` is allocated by ``OrderNumberGenerator`` from the
  ``OrderSequence`` counter; the unique index is the last line of defence.
- ``OrderItem`` is a frozen snapshot: ``product_id`` is a weak reference
  (no FK) so catalog changes or deletions never alter an existing order.
- ``subtotal``, ``delivery_fee`` and ``total`` are computed once at checkout
  and never recomputed.
- ``user`` FK uses PROTECT to preserve order history.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    CUSTOMER_TRANSITIONS,
    OPERATOR_TRANSITIONS,
    TERMINAL_STATES,
    DeliveryOption,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin

MONEY = {"max_digits": 12, "decimal_places": 2}


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root.

    The UUIDv7 ``id`` is used for all API lookups; ``order_number``
    (``RC<YY><MM><seq>``) is the human-facing reference.
    """

    order_number = models.CharField(max_length=32, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    shipping_address = models.JSONField()
    delivery_option = models.CharField(
        max_length=20,
        choices=DeliveryOption.choices,
        default=DeliveryOption.STANDARD,
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.COD,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    subtotal = models.DecimalField(**MONEY, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(**MONEY, default=Decimal("0.00"))
    total = models.DecimalField(**MONEY, default=Decimal("0.00"))
    notes = models.TextField(blank=True, default="")
    delivered_at = models.DateTimeField(null=True, blank=True, default=None)
    cancelled_at = models.DateTimeField(null=True, blank=True, default=None)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str, as_operator: bool = False) -> bool:
        table = OPERATOR_TRANSITIONS if as_operator else CUSTOMER_TRANSITIONS
        return new_status in table.get(self.status, frozenset())

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Frozen snapshot of one purchased line."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=255)
    image = models.CharField(max_length=500, blank=True, default="")
    unit_price = models.DecimalField(**MONEY)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    size = models.CharField(max_length=32)
    color = models.JSONField(null=True, blank=True, default=None)
    subtotal = models.DecimalField(**MONEY, editable=False)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        self.subtotal = self.unit_price * self.quantity
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity} ({self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``user`` is nullable: ``None`` means the change was made by the system.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"


class OrderSequence(models.Model):
    """Named monotonic counter backing order numbers."""

    name = models.CharField(max_length=50, primary_key=True)
    value = models.PositiveBigIntegerField(default=0)

    class Meta:
        db_table = "order_sequences"

    def __str__(self) -> str:
        return f"{self.name}={self.value}"
