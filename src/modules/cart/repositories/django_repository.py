"""Django ORM implementation of the Cart repository."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.cart.models import Cart, CartLine
from modules.cart.repositories.interfaces import ICartRepository
from modules.core.retry import retry_on_transient_errors

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    @retry_on_transient_errors()
    def get_by_id(self, id: str) -> Optional[Cart]:
        try:
            return Cart.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def save(self, entity: Cart) -> Cart:
        entity.save()
        return entity

    def get_or_create_for_user(self, user_id: int) -> Cart:
        cart, created = Cart.objects.get_or_create(user_id=user_id)
        if created:
            logger.info("cart.created", cart_id=str(cart.id), user_id=user_id)
        return cart

    def lock_for_user(self, user_id: int, create: bool = True) -> Optional[Cart]:
        if create:
            self.get_or_create_for_user(user_id)
        return Cart.objects.select_for_update().filter(user_id=user_id).first()

    def lines(self, cart: Cart) -> List[CartLine]:
        return list(
            CartLine.objects.filter(cart=cart)
            .select_related("product")
            .order_by("created_at", "id")
        )

    def get_line(self, cart: Cart, line_id: UUID) -> Optional[CartLine]:
        try:
            return (
                CartLine.objects.select_related("product")
                .filter(cart=cart, id=line_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def add_line(
        self,
        cart: Cart,
        product_id: UUID,
        quantity: int,
        size: str,
        color: Optional[dict],
    ) -> CartLine:
        return CartLine.objects.create(
            cart=cart,
            product_id=product_id,
            quantity=quantity,
            size=size,
            color=color,
        )

    def save_line(self, line: CartLine) -> CartLine:
        line.save(update_fields=["quantity"])
        return line

    def delete_line(self, line: CartLine) -> None:
        line.delete()

    def clear(self, cart: Cart) -> int:
        removed, _ = CartLine.objects.filter(cart=cart).delete()
        return removed

    @transaction.atomic
    def claim(self, cart: Cart) -> bool:
        updated = Cart.objects.filter(id=cart.id, version=cart.version).update(
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        if updated:
            cart.version += 1
        return updated == 1
