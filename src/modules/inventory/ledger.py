"""Inventory ledger: atomic stock adjustments.

``try_reserve`` is the one correctness-critical primitive of order
processing.  It is a single conditional ``UPDATE``::

    UPDATE products
       SET stock_quantity = stock_quantity - :qty
     WHERE id = :id AND stock_quantity >= :qty

so the availability check and the decrement happen in one statement; no
caller ever reads stock and writes it back.  Concurrent reservations on the
same row are serialised by the database row lock and the sum of successful
decrements can never exceed the starting stock.

``release`` is the compensating increment (checkout rollback, cancellation).
``peek`` is for display only and must never gate a reservation.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import structlog
from django.db.models import F
from django.utils import timezone

from modules.core.retry import retry_on_transient_errors
from modules.inventory.exceptions import InvalidQuantity
from modules.products.models import Product

logger = structlog.get_logger(__name__)


def _require_positive(quantity: int) -> None:
    if quantity < 1:
        raise InvalidQuantity(f"Quantity must be at least 1, got {quantity}.")


class InventoryLedger:
    @retry_on_transient_errors()
    def try_reserve(self, product_id: UUID, quantity: int) -> bool:
        """Atomically take *quantity* units; ``False`` means insufficient stock."""
        _require_positive(quantity)
        updated = Product.objects.filter(
            id=product_id, stock_quantity__gte=quantity
        ).update(
            stock_quantity=F("stock_quantity") - quantity,
            updated_at=timezone.now(),
        )
        reserved = updated == 1
        logger.info(
            "inventory.reserved" if reserved else "inventory.reservation_rejected",
            product_id=str(product_id),
            quantity=quantity,
        )
        return reserved

    @retry_on_transient_errors()
    def release(self, product_id: UUID, quantity: int) -> None:
        """Atomically give back *quantity* units.

        Soft-deleted products still get their stock back; a product row that
        no longer exists has nothing to restore.
        """
        _require_positive(quantity)
        updated = Product.objects.filter(id=product_id).update(
            stock_quantity=F("stock_quantity") + quantity,
            updated_at=timezone.now(),
        )
        if updated:
            logger.info(
                "inventory.released", product_id=str(product_id), quantity=quantity
            )
        else:
            logger.warning(
                "inventory.release_skipped",
                product_id=str(product_id),
                quantity=quantity,
                reason="product_missing",
            )

    @retry_on_transient_errors()
    def peek(self, product_id: UUID) -> Optional[int]:
        """Current stock for display; ``None`` if the product row is gone."""
        return (
            Product.objects.filter(id=product_id)
            .values_list("stock_quantity", flat=True)
            .first()
        )
