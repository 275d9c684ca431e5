"""Order domain constants.

Status choices and the two transition tables of the order state machine:
customers may only cancel early; operators may move an order forward along
the fulfilment path (skipping steps) or cancel it from any non-terminal
status.  Nothing leaves ``delivered`` or ``cancelled``.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class PaymentMethod(models.TextChoices):
    COD = "cod", "Cash on delivery"
    CARD = "card", "Card"
    EASYPAISA = "easypaisa", "Easypaisa"
    JAZZCASH = "jazzcash", "JazzCash"


class DeliveryOption(models.TextChoices):
    STANDARD = "standard", "Standard"
    EXPRESS = "express", "Express"


FULFILMENT_PATH: tuple[str, ...] = (
    OrderStatus.PENDING.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
)

TERMINAL_STATES: frozenset[str] = frozenset(
    {OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value}
)

CUSTOMER_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.PENDING.value: frozenset({OrderStatus.CANCELLED.value}),
    OrderStatus.CONFIRMED.value: frozenset({OrderStatus.CANCELLED.value}),
}

OPERATOR_TRANSITIONS: dict[str, frozenset[str]] = {
    status: frozenset(
        () if status in TERMINAL_STATES
        else {*FULFILMENT_PATH[index + 1:], OrderStatus.CANCELLED.value}
    )
    for index, status in enumerate(FULFILMENT_PATH)
}
OPERATOR_TRANSITIONS[OrderStatus.CANCELLED.value] = frozenset()

COLLECT_ON_DELIVERY_METHODS: frozenset[str] = frozenset({PaymentMethod.COD.value})

ORDER_SEQUENCE_NAME = "orders"
