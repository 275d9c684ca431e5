"""Product catalog entry as consumed by the order-processing core.

Catalog CRUD belongs to another service; this module owns the table shape the
core reads (name, price, images, status) and the ``stock_quantity`` column
the inventory ledger adjusts.

- SKU is unique and normalised to uppercase.
- Price must be greater than zero.
- Stock can never be negative (check constraint; decrements are conditional).
- Soft delete via ``deleted_at``: a deleted product is "missing" for carts and
  checkout, while historical orders keep their own snapshot.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(SoftDeleteModel):
    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    @property
    def is_available(self) -> bool:
        """Sellable: not soft-deleted and active."""
        return not self.is_deleted and self.status == ProductStatus.ACTIVE

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)
        if is_new:
            logger.info("product.created", product_id=str(self.id), sku=self.sku)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
