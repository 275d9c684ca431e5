from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.orders.constants import DeliveryOption, PaymentMethod
from modules.orders.dtos import CheckoutDTO, ShippingAddressDTO

pytestmark = pytest.mark.unit


def test_defaults_are_standard_cod():
    dto = CheckoutDTO(shipping_address=ShippingAddressDTO(street="1 Mall Road", city="Lahore"))

    assert dto.delivery_option == DeliveryOption.STANDARD
    assert dto.payment_method == PaymentMethod.COD


@pytest.mark.parametrize("field", ["street", "city"])
def test_address_requires_street_and_city(field):
    data = {"street": "1 Mall Road", "city": "Lahore", field: "   "}

    with pytest.raises(ValidationError):
        ShippingAddressDTO(**data)


def test_unknown_payment_method_is_rejected():
    with pytest.raises(ValidationError):
        CheckoutDTO(
            shipping_address=ShippingAddressDTO(street="1 Mall Road", city="Lahore"),
            payment_method="bitcoin",
        )
