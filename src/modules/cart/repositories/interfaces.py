"""Cart repository interface.

The cart aggregate is a ``Cart`` row plus its ``CartLine`` children.  Every
mutating service call locks the cart row first (``lock_for_user``), which is
the per-user exclusion shared by cart edits and checkout.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.cart.models import Cart, CartLine


class ICartRepository(IRepository["Cart"]):
    @abstractmethod
    def get_or_create_for_user(self, user_id: int) -> Cart:
        """The user's cart, created empty on first access."""

    @abstractmethod
    def lock_for_user(self, user_id: int, create: bool = True) -> Optional[Cart]:
        """The user's cart under a row lock (must run inside a transaction).

        With ``create=False`` a user without a cart gets ``None``.
        """

    @abstractmethod
    def lines(self, cart: Cart) -> List[CartLine]:
        """Lines in insertion order with their products loaded."""

    @abstractmethod
    def get_line(self, cart: Cart, line_id: UUID) -> Optional[CartLine]:
        """A line of *this* cart; ``None`` if it belongs elsewhere or is gone."""

    @abstractmethod
    def add_line(
        self,
        cart: Cart,
        product_id: UUID,
        quantity: int,
        size: str,
        color: Optional[dict],
    ) -> CartLine:
        """Append a new line."""

    @abstractmethod
    def save_line(self, line: CartLine) -> CartLine:
        """Persist a quantity change."""

    @abstractmethod
    def delete_line(self, line: CartLine) -> None:
        """Remove one line."""

    @abstractmethod
    def clear(self, cart: Cart) -> int:
        """Remove every line; returns how many were removed."""

    @abstractmethod
    def claim(self, cart: Cart) -> bool:
        """Bump the version if it still equals ``cart.version``.

        ``False`` means another checkout consumed the cart first.
        """
