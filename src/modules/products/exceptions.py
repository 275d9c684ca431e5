"""Catalog lookup errors raised while building carts and orders."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError, NotFound


class ProductNotFound(NotFound):
    """The product does not exist or has been soft-deleted."""

    default_code = "product_not_found"
    default_detail = "Product not found."


class ProductUnavailable(DomainError):
    """The product is missing or inactive and cannot be bought."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "product_unavailable"
    default_detail = "Product no longer available."
