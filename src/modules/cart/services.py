"""Cart service layer.

The cart is a pre-order scratchpad: nothing here reserves stock.  The stock
checks in ``add_line`` and ``update_line`` are advisory (they read the
current ``stock_quantity``); the authoritative check is the conditional
decrement performed at checkout.

Every mutation runs in one transaction that starts by locking the user's
cart row, so cart edits and a checkout of the same cart never interleave.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

import structlog
from django.db import transaction

from modules.cart.exceptions import CartLineNotFound
from modules.inventory.exceptions import InsufficientStock
from modules.orders.constants import DeliveryOption
from modules.orders.pricing import ZERO, DeliveryPricing
from modules.products.exceptions import ProductNotFound, ProductUnavailable

if TYPE_CHECKING:
    from modules.cart.dtos import AddCartLineDTO
    from modules.cart.models import Cart, CartLine
    from modules.cart.repositories.interfaces import ICartRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass
class CartSummary:
    cart: Cart
    lines: List[CartLine] = field(default_factory=list)
    subtotal: Decimal = ZERO
    item_count: int = 0
    delivery_fee: Decimal = ZERO
    free_delivery_remaining: Decimal = ZERO

    @property
    def is_empty(self) -> bool:
        return not self.lines


class CartService:
    """Application service for the per-user cart.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        pricing: Optional[DeliveryPricing] = None,
    ) -> None:
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._pricing = pricing or DeliveryPricing.from_settings()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_line(self, user_id: int, dto: AddCartLineDTO) -> CartLine:
        """Add a selection, merging into an identical (product, size, color) line.

        Raises:
            ProductNotFound: the product does not exist or was deleted.
            ProductUnavailable: the product is inactive.
            InsufficientStock: the resulting line quantity exceeds stock.
        """
        log = logger.bind(user_id=user_id, product_id=str(dto.product_id))

        product = self._product_repo.get_by_id(str(dto.product_id))
        if product is None:
            raise ProductNotFound(f"Product {dto.product_id} not found.")
        if not product.is_available:
            raise ProductUnavailable(f"{product.name} is no longer available.")

        cart = self._cart_repo.lock_for_user(user_id)
        color = dto.color_payload
        existing = next(
            (
                line
                for line in self._cart_repo.lines(cart)
                if line.matches(product.id, dto.size, color)
            ),
            None,
        )

        requested = dto.quantity + (existing.quantity if existing else 0)
        if requested > product.stock_quantity:
            log.info(
                "cart.insufficient_stock",
                requested=requested,
                available=product.stock_quantity,
            )
            raise InsufficientStock(
                product.name,
                f"Insufficient stock for {product.name}: requested {requested}, "
                f"available {product.stock_quantity}.",
            )

        if existing is not None:
            existing.quantity = requested
            line = self._cart_repo.save_line(existing)
            log.info("cart.line_merged", line_id=str(line.id), quantity=requested)
        else:
            line = self._cart_repo.add_line(
                cart, product.id, dto.quantity, dto.size, color
            )
            log.info("cart.line_added", line_id=str(line.id), quantity=dto.quantity)
        return line

    def update_line(self, user_id: int, line_id: UUID, quantity: int) -> Optional[CartLine]:
        """Set a line's quantity; ``quantity <= 0`` removes the line.

        Returns the updated line, or ``None`` when it was removed.

        Raises:
            CartLineNotFound: no cart or no such line in it.
            ProductUnavailable: the product was deleted; the line is removed
                before the error is raised.
            InsufficientStock: *quantity* exceeds current stock.
        """
        log = logger.bind(user_id=user_id, line_id=str(line_id))

        with transaction.atomic():
            cart = self._cart_repo.lock_for_user(user_id, create=False)
            line = self._cart_repo.get_line(cart, line_id) if cart else None
            if line is None:
                raise CartLineNotFound(f"Cart line {line_id} not found.")

            product = self._product_repo.get_by_id(str(line.product_id))
            if product is not None:
                return self._apply_quantity(line, product, quantity, log)

            self._cart_repo.delete_line(line)
            log.warning("cart.line_dropped", product_id=str(line.product_id))

        # outside the atomic block so the removal is kept
        raise ProductUnavailable(f"{line.product.name} is no longer available.")

    def _apply_quantity(self, line: CartLine, product, quantity: int, log) -> Optional[CartLine]:
        if quantity <= 0:
            self._cart_repo.delete_line(line)
            log.info("cart.line_removed")
            return None
        if quantity > product.stock_quantity:
            raise InsufficientStock(
                product.name,
                f"Insufficient stock for {product.name}: requested {quantity}, "
                f"available {product.stock_quantity}.",
            )
        line.quantity = quantity
        self._cart_repo.save_line(line)
        log.info("cart.line_updated", quantity=quantity)
        return line

    @transaction.atomic
    def remove_line(self, user_id: int, line_id: UUID) -> None:
        """Raises ``CartLineNotFound`` when the line is not in the user's cart."""
        cart = self._cart_repo.lock_for_user(user_id, create=False)
        line = self._cart_repo.get_line(cart, line_id) if cart else None
        if line is None:
            raise CartLineNotFound(f"Cart line {line_id} not found.")
        self._cart_repo.delete_line(line)
        logger.info("cart.line_removed", user_id=user_id, line_id=str(line_id))

    @transaction.atomic
    def clear(self, user_id: int) -> None:
        cart = self._cart_repo.lock_for_user(user_id, create=False)
        if cart is None:
            return
        removed = self._cart_repo.clear(cart)
        logger.info("cart.cleared", user_id=user_id, removed=removed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @transaction.atomic
    def get_cart(self, user_id: int) -> CartSummary:
        """The user's cart priced at current catalog prices.

        Lines whose product has been deleted are dropped (and the drop
        persisted).  The delivery quote uses the standard option; an empty
        cart has nothing to deliver and is quoted at zero.
        """
        cart = self._cart_repo.get_or_create_for_user(user_id)

        lines: List[CartLine] = []
        for line in self._cart_repo.lines(cart):
            if line.product.is_deleted:
                self._cart_repo.delete_line(line)
                logger.warning(
                    "cart.line_dropped",
                    user_id=user_id,
                    line_id=str(line.id),
                    product_id=str(line.product_id),
                )
                continue
            lines.append(line)

        subtotal = sum((line.line_total for line in lines), ZERO)
        summary = CartSummary(
            cart=cart,
            lines=lines,
            subtotal=subtotal,
            item_count=sum(line.quantity for line in lines),
        )
        if lines:
            summary.delivery_fee = self._pricing.fee_for(
                DeliveryOption.STANDARD, subtotal
            )
            summary.free_delivery_remaining = self._pricing.free_delivery_remaining(
                subtotal
            )
        else:
            summary.free_delivery_remaining = self._pricing.free_threshold
        return summary
