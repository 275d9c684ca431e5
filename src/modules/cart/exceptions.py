"""Cart domain exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import Conflict, DomainError, NotFound


class CartLineNotFound(NotFound):
    default_code = "cart_line_not_found"
    default_detail = "Item not found in cart."


class EmptyCart(DomainError):
    """Checkout of a cart without lines."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "empty_cart"
    default_detail = "Cart is empty."


class CartAlreadyCheckedOut(Conflict):
    """Another checkout consumed the cart first."""

    default_code = "cart_already_checked_out"
    default_detail = "Cart was already checked out."
