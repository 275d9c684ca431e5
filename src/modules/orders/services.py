"""Order service layer (Use Cases).

``CheckoutService`` turns a cart into an order; ``OrderService`` drives the
order state machine and the read paths.  Write operations are atomic: the
service defines the unit-of-work boundary.

Concurrency rules:
- stock is only ever taken through ``InventoryLedger.try_reserve`` (a
  conditional decrement), in ascending product-id order;
- a checkout holds the user's cart row lock and claims the cart with an
  optimistic version bump, so one cart yields at most one order;
- a transition holds the order row lock and writes the new status only if
  the stored status is still the one it read, so the stock release of a
  cancellation runs exactly once.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.cart.exceptions import CartAlreadyCheckedOut, EmptyCart
from modules.core.exceptions import DomainError, Unauthorized
from modules.inventory import InsufficientStock, InventoryLedger
from modules.orders.constants import (
    COLLECT_ON_DELIVERY_METHODS,
    OrderStatus,
    PaymentStatus,
)
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderDeleted,
    OrderDelivered,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    IllegalTransition,
    InvalidStatus,
    OrderConflict,
    OrderNotFound,
)
from modules.orders.pricing import ZERO, DeliveryPricing
from modules.orders.sequence import OrderNumberGenerator
from modules.products.exceptions import ProductUnavailable

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.cart.repositories.interfaces import ICartRepository
    from modules.core.identity import Actor
    from modules.orders.dtos import CheckoutDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CheckoutService:
    """Converts the caller's cart into an order in one transaction.

    Receives repositories and collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        ledger: Optional[InventoryLedger] = None,
        number_generator: Optional[OrderNumberGenerator] = None,
        pricing: Optional[DeliveryPricing] = None,
    ) -> None:
        self._order_repo = order_repository
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._ledger = ledger or InventoryLedger()
        self._numbers = number_generator or OrderNumberGenerator()
        self._pricing = pricing or DeliveryPricing.from_settings()

    @transaction.atomic
    def checkout(self, user_id: int, dto: CheckoutDTO) -> Order:
        """Place an order for everything in the user's cart.

        Steps:
        1. Lock the cart; no lines means ``EmptyCart``.
        2. Resolve live products; missing or inactive means ``ProductUnavailable``.
        3. Reserve the summed quantity per product, ascending by product id.
           On the first refusal every reservation already made is released
           and ``InsufficientStock`` names the product.
        4. Price the order with the prices read in step 2.
        5. Allocate the order number and persist order, items, history and
           the ``OrderCreated`` outbox event.
        6. Claim the cart (version bump) and empty it.

        Never retried: a failure leaves stock and cart as they were.
        """
        log = logger.bind(user_id=user_id)
        log.info("checkout.started")

        cart = self._cart_repo.lock_for_user(user_id, create=False)
        lines = self._cart_repo.lines(cart) if cart is not None else []
        if not lines:
            log.info("checkout.rejected", reason=EmptyCart.default_code)
            raise EmptyCart()

        products = self._product_repo.get_many({line.product_id for line in lines})
        for line in lines:
            product = products.get(line.product_id)
            if product is None or not product.is_available:
                log.info(
                    "checkout.rejected",
                    reason=ProductUnavailable.default_code,
                    product_id=str(line.product_id),
                )
                raise ProductUnavailable(f"{line.product.name} is no longer available.")

        quantities: Dict[UUID, int] = defaultdict(int)
        for line in lines:
            quantities[line.product_id] += line.quantity

        reserved: List[Tuple[UUID, int]] = []
        try:
            for product_id in sorted(quantities):
                quantity = quantities[product_id]
                if not self._ledger.try_reserve(product_id, quantity):
                    raise InsufficientStock(products[product_id].name)
                reserved.append((product_id, quantity))

            subtotal = sum(
                (products[line.product_id].price * line.quantity for line in lines),
                ZERO,
            )
            delivery_fee = self._pricing.fee_for(dto.delivery_option, subtotal)
            order = self._place_order(user_id, dto, lines, products, subtotal, delivery_fee)

            if not self._cart_repo.claim(cart):
                raise CartAlreadyCheckedOut()
            self._cart_repo.clear(cart)
        except DomainError as exc:
            self._compensate(reserved, log)
            log.warning("checkout.failed", reason=exc.default_code, detail=exc.detail)
            raise

        log.info(
            "checkout.completed",
            order_id=str(order.id),
            order_number=order.order_number,
            subtotal=str(order.subtotal),
            delivery_fee=str(order.delivery_fee),
            total=str(order.total),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    def _place_order(
        self,
        user_id: int,
        dto: CheckoutDTO,
        lines,
        products,
        subtotal: Decimal,
        delivery_fee: Decimal,
    ) -> Order:
        items = []
        for line in lines:
            product = products[line.product_id]
            items.append(
                {
                    "product_id": product.id,
                    "name": product.name,
                    "image": product.primary_image,
                    "unit_price": product.price,
                    "quantity": line.quantity,
                    "size": line.size,
                    "color": line.color,
                }
            )

        order = self._order_repo.create(
            {
                "order_number": self._numbers.next_number(),
                "user_id": user_id,
                "shipping_address": dto.shipping_address.model_dump(),
                "delivery_option": dto.delivery_option,
                "payment_method": dto.payment_method,
                "subtotal": subtotal,
                "delivery_fee": delivery_fee,
                "total": subtotal + delivery_fee,
                "notes": dto.notes or "",
                "items": items,
            }
        )
        self._order_repo.add_history(
            order, OrderStatus.PENDING, user_id=user_id, notes="Order placed"
        )
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                user_id=user_id,
                total=str(order.total),
            )
        )
        return self._order_repo.save(order)

    def _compensate(self, reserved: Iterable[Tuple[UUID, int]], log) -> None:
        for product_id, quantity in reserved:
            self._ledger.release(product_id, quantity)
            log.info(
                "checkout.reservation_released",
                product_id=str(product_id),
                quantity=quantity,
            )


class OrderService:
    """Order state machine and query surface.

    Receives the repository and the ledger via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        ledger: Optional[InventoryLedger] = None,
    ) -> None:
        self._order_repo = order_repository
        self._ledger = ledger or InventoryLedger()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def cancel_order(self, order_id: UUID, actor: Actor, notes: str = "") -> Order:
        """Customer cancellation of one of the actor's own orders.

        Allowed from ``pending`` and ``confirmed``; cancelling an already
        cancelled order is a no-op.

        Raises:
            OrderNotFound: the order does not exist or is not the actor's.
            IllegalTransition: the order is past ``confirmed``.
        """
        return self._transition(
            order_id, OrderStatus.CANCELLED, actor, notes, as_operator=False
        )

    def change_status(
        self, order_id: UUID, new_status: str, actor: Actor, notes: str = ""
    ) -> Order:
        """Operator transition (forward along fulfilment, or cancel).

        Raises:
            Unauthorized: the actor is not an operator.
            InvalidStatus: *new_status* is not an order status.
            OrderNotFound: the order does not exist.
            IllegalTransition: backwards move or move out of a terminal status.
        """
        if not actor.is_operator:
            raise Unauthorized("Only operators can change order status.")
        if new_status not in OrderStatus.values:
            raise InvalidStatus(new_status)
        return self._transition(order_id, new_status, actor, notes, as_operator=True)

    @transaction.atomic
    def delete_order(self, order_id: UUID, actor: Actor) -> None:
        """Administrative soft delete; stock is deliberately not released."""
        if not actor.is_operator:
            raise Unauthorized("Only operators can delete orders.")
        order = self._order_repo.get_for_update(str(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        order.add_domain_event(
            OrderDeleted(aggregate_id=order.id, order_number=order.order_number)
        )
        self._order_repo.delete(order)
        logger.info(
            "order.deleted",
            order_id=str(order.id),
            status=order.status,
            operator_id=actor.user_id,
        )

    @transaction.atomic
    def _transition(
        self,
        order_id: UUID,
        target: str,
        actor: Actor,
        notes: str,
        as_operator: bool,
    ) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if order is None or (not as_operator and order.user_id != actor.user_id):
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=target,
            actor_id=actor.user_id,
        )

        if order.status == target:
            log.info("order.transition_noop")
            return order

        if not order.can_transition_to(target, as_operator=as_operator):
            log.warning("order.invalid_transition")
            raise IllegalTransition(order.status, target)

        old_status = order.status
        now = timezone.now()
        fields = {}
        if target == OrderStatus.CANCELLED:
            fields["cancelled_at"] = now
        elif target == OrderStatus.DELIVERED:
            fields["delivered_at"] = now
            if order.payment_method in COLLECT_ON_DELIVERY_METHODS:
                fields["payment_status"] = PaymentStatus.PAID

        if not self._order_repo.compare_and_set_status(order, target, **fields):
            log.warning("order.transition_conflict")
            raise OrderConflict()

        if target == OrderStatus.CANCELLED:
            self._release_stock(order)

        self._order_repo.add_history(
            order, target, old_status=old_status, user_id=actor.user_id, notes=notes
        )
        order.add_domain_event(self._event_for(order, old_status, target))
        self._order_repo.save(order)

        log.info(
            "order.cancelled" if target == OrderStatus.CANCELLED else "order.status_changed",
            old_status=old_status,
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    def _release_stock(self, order: Order) -> None:
        quantities: Dict[UUID, int] = defaultdict(int)
        for item in order.items.all():
            quantities[item.product_id] += item.quantity
        for product_id in sorted(quantities):
            self._ledger.release(product_id, quantities[product_id])

    @staticmethod
    def _event_for(order: Order, old_status: str, target: str):
        if target == OrderStatus.CANCELLED:
            return OrderCancelled(
                aggregate_id=order.id,
                order_number=order.order_number,
                old_status=old_status,
            )
        if target == OrderStatus.DELIVERED:
            return OrderDelivered(
                aggregate_id=order.id,
                order_number=order.order_number,
                payment_status=order.payment_status,
            )
        return OrderStatusChanged(
            aggregate_id=order.id,
            order_number=order.order_number,
            old_status=old_status,
            new_status=target,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID, actor: Actor) -> Order:
        """The order, for its owner or an operator.

        Raises:
            OrderNotFound: missing, deleted, or owned by someone else.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if order is None or (not actor.is_operator and order.user_id != actor.user_id):
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_user_orders(self, actor: Actor) -> QuerySet:
        """The actor's own orders, newest first."""
        return self._order_repo.for_user(actor.user_id)

    def list_orders(self, actor: Actor) -> QuerySet:
        """Every order, newest first (operators only)."""
        if not actor.is_operator:
            raise Unauthorized("Only operators can list all orders.")
        return self._order_repo.all()
