"""Cart and CartLine models.

- One cart per user, created lazily and never deleted (only emptied).
- ``version`` is bumped by every successful checkout; checkout claims the
  cart with ``UPDATE ... WHERE version = <read version>``.
- Lines with the same ``(product, size, color)`` are merged by the service.
- ``product`` is a live reference: cart lines always price at the current
  catalog price.  Deleting a product row removes its lines.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class Cart(BaseModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
    )
    version = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "carts"

    def __str__(self) -> str:
        return f"Cart of user {self.user_id} (v{self.version})"


class CartLine(BaseModel):
    cart = models.ForeignKey(
        "cart.Cart",
        on_delete=models.CASCADE,
        related_name="lines",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="cart_lines",
    )
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    size = models.CharField(max_length=32)
    color = models.JSONField(null=True, blank=True, default=None)

    class Meta:
        db_table = "cart_lines"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="cart_lines_quantity_positive",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        """Quantity times the product's *current* price."""
        return self.product.price * self.quantity

    def matches(self, product_id, size: str, color) -> bool:
        return (
            self.product_id == product_id
            and self.size == size
            and (self.color or None) == (color or None)
        )

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} ({self.size})"
