from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from modules.cart.dtos import AddCartLineDTO, ColorDTO

pytestmark = pytest.mark.unit


def test_quantity_defaults_to_one():
    dto = AddCartLineDTO(product_id=uuid.uuid4(), size="M")
    assert dto.quantity == 1
    assert dto.color_payload is None


@pytest.mark.parametrize("quantity", [0, -3])
def test_quantity_must_be_positive(quantity):
    with pytest.raises(ValidationError):
        AddCartLineDTO(product_id=uuid.uuid4(), quantity=quantity, size="M")


@pytest.mark.parametrize("size", ["", "   "])
def test_size_is_required(size):
    with pytest.raises(ValidationError):
        AddCartLineDTO(product_id=uuid.uuid4(), size=size)


def test_size_is_trimmed():
    assert AddCartLineDTO(product_id=uuid.uuid4(), size=" XL ").size == "XL"


def test_color_payload_is_plain_dict():
    dto = AddCartLineDTO(
        product_id=uuid.uuid4(), size="M", color=ColorDTO(name="Black", hex="#000000")
    )
    assert dto.color_payload == {"name": "Black", "hex": "#000000"}


def test_color_hex_is_validated():
    with pytest.raises(ValidationError):
        ColorDTO(name="Black", hex="black")


def test_dto_is_immutable():
    dto = AddCartLineDTO(product_id=uuid.uuid4(), size="M")
    with pytest.raises(ValidationError):
        dto.quantity = 5
