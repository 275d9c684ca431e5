"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are the
contracts between the API layer (DRF Serializers) and the Service layer.
DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import DeliveryOption, PaymentMethod


class ShippingAddressDTO(BaseModel):
    """Copied verbatim onto the order; later address edits do not affect it."""

    model_config = ConfigDict(frozen=True)

    label: str = ""
    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(default="", max_length=20)

    @field_validator("street", "city")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field may not be blank.")
        return v


class CheckoutDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    shipping_address: ShippingAddressDTO
    delivery_option: DeliveryOption = DeliveryOption.STANDARD
    payment_method: PaymentMethod = PaymentMethod.COD
    notes: Optional[str] = ""
