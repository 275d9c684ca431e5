"""Delivery fee rule.

One rule for every call site: the fee depends only on the delivery option
and the order subtotal, never on the items.

- express: flat ``EXPRESS_DELIVERY_FEE``;
- standard: free when ``subtotal >= FREE_DELIVERY_THRESHOLD``, otherwise
  ``STANDARD_DELIVERY_FEE``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from modules.orders.constants import DeliveryOption

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class DeliveryPricing:
    free_threshold: Decimal
    standard_fee: Decimal
    express_fee: Decimal

    @classmethod
    def from_settings(cls) -> DeliveryPricing:
        return cls(
            free_threshold=Decimal(settings.FREE_DELIVERY_THRESHOLD),
            standard_fee=Decimal(settings.STANDARD_DELIVERY_FEE),
            express_fee=Decimal(settings.EXPRESS_DELIVERY_FEE),
        )

    def fee_for(self, option: str, subtotal: Decimal) -> Decimal:
        if option == DeliveryOption.EXPRESS:
            return self.express_fee
        if option == DeliveryOption.STANDARD:
            return ZERO if subtotal >= self.free_threshold else self.standard_fee
        raise ValueError(f"Unknown delivery option: {option!r}")

    def free_delivery_remaining(self, subtotal: Decimal) -> Decimal:
        """How much more a standard-delivery cart needs to ship for free."""
        return max(self.free_threshold - subtotal, ZERO)
