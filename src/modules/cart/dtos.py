"""Cart DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColorDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=50)
    hex: str = Field(pattern=r"^#[0-9A-Fa-f]{6}$")


class AddCartLineDTO(BaseModel):
    """A product/size/color selection to put into the cart."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int = 1
    size: str
    color: Optional[ColorDTO] = None

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("size")
    @classmethod
    def size_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Size is required.")
        return v

    @property
    def color_payload(self) -> Optional[dict]:
        return self.color.model_dump() if self.color else None
