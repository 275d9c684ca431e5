"""Inventory ledger errors."""

from __future__ import annotations

from typing import Optional

from modules.core.exceptions import Conflict, RequestValidationError


class InvalidQuantity(RequestValidationError):
    """Stock adjustments must move at least one unit."""

    default_code = "invalid_quantity"
    default_detail = "Quantity must be at least 1."


class InsufficientStock(Conflict):
    """Not enough stock for the requested quantity of one product."""

    default_code = "insufficient_stock"
    default_detail = "Insufficient stock."

    def __init__(self, product_name: str, detail: Optional[str] = None) -> None:
        self.product_name = product_name
        super().__init__(detail or f"Insufficient stock for {product_name}.")
