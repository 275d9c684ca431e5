"""Unit tests for CheckoutService with mocked collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock, call
from uuid import UUID

import pytest

from modules.cart.exceptions import CartAlreadyCheckedOut
from modules.inventory import InsufficientStock
from modules.orders.dtos import CheckoutDTO, ShippingAddressDTO
from modules.orders.pricing import DeliveryPricing
from modules.orders.services import CheckoutService

pytestmark = pytest.mark.unit

LOW = UUID("00000000-0000-7000-8000-000000000001")
HIGH = UUID("00000000-0000-7000-8000-000000000002")


@dataclass
class StubProduct:
    id: UUID
    name: str
    price: Decimal
    is_available: bool = True
    primary_image: str = ""


@dataclass
class StubLine:
    product_id: UUID
    quantity: int
    size: str = "M"
    color: dict | None = None
    product: SimpleNamespace = field(default_factory=lambda: SimpleNamespace(name="stub"))


@pytest.fixture()
def products():
    return {
        LOW: StubProduct(id=LOW, name="Kurta", price=Decimal("1000.00")),
        HIGH: StubProduct(id=HIGH, name="Shawl", price=Decimal("3000.00")),
    }


@pytest.fixture()
def collaborators(products):
    cart = SimpleNamespace(id="cart-1", version=3)
    cart_repo = MagicMock()
    cart_repo.lock_for_user.return_value = cart
    # HIGH first so sorting is observable
    cart_repo.lines.return_value = [StubLine(HIGH, 1), StubLine(LOW, 2), StubLine(LOW, 1, "L")]
    cart_repo.claim.return_value = True

    product_repo = MagicMock()
    product_repo.get_many.return_value = products

    order_repo = MagicMock()
    order = MagicMock(id="order-1", order_number="RC250700001")
    order_repo.create.return_value = order
    order_repo.save.return_value = order
    order_repo.get_by_id.return_value = order

    ledger = MagicMock()
    ledger.try_reserve.return_value = True

    numbers = MagicMock()
    numbers.next_number.return_value = "RC250700001"

    return SimpleNamespace(
        cart=cart,
        cart_repo=cart_repo,
        product_repo=product_repo,
        order_repo=order_repo,
        ledger=ledger,
        numbers=numbers,
    )


@pytest.fixture()
def service(collaborators):
    return CheckoutService(
        order_repository=collaborators.order_repo,
        cart_repository=collaborators.cart_repo,
        product_repository=collaborators.product_repo,
        ledger=collaborators.ledger,
        number_generator=collaborators.numbers,
        pricing=DeliveryPricing(
            free_threshold=Decimal("5000"),
            standard_fee=Decimal("250"),
            express_fee=Decimal("250"),
        ),
    )


@pytest.fixture()
def dto():
    return CheckoutDTO(shipping_address=ShippingAddressDTO(street="1 Mall Road", city="Lahore"))


def test_reserves_summed_quantities_in_product_id_order(service, collaborators, dto):
    service.checkout(1, dto)

    assert collaborators.ledger.try_reserve.call_args_list == [call(LOW, 3), call(HIGH, 1)]
    collaborators.ledger.release.assert_not_called()


def test_prices_with_checkout_time_prices(service, collaborators, dto):
    service.checkout(1, dto)

    data = collaborators.order_repo.create.call_args.args[0]
    assert data["subtotal"] == Decimal("6000.00")
    assert data["delivery_fee"] == Decimal("0.00")
    assert data["total"] == Decimal("6000.00")
    assert data["order_number"] == "RC250700001"
    assert len(data["items"]) == 3


def test_refusal_releases_earlier_reservations_before_raising(service, collaborators, dto):
    collaborators.ledger.try_reserve.side_effect = [True, False]

    with pytest.raises(InsufficientStock) as excinfo:
        service.checkout(1, dto)

    assert excinfo.value.product_name == "Shawl"
    collaborators.ledger.release.assert_called_once_with(LOW, 3)
    collaborators.order_repo.create.assert_not_called()
    collaborators.numbers.next_number.assert_not_called()
    collaborators.cart_repo.clear.assert_not_called()


def test_lost_cart_claim_releases_all_reservations(service, collaborators, dto):
    collaborators.cart_repo.claim.return_value = False

    with pytest.raises(CartAlreadyCheckedOut):
        service.checkout(1, dto)

    assert collaborators.ledger.release.call_args_list == [call(LOW, 3), call(HIGH, 1)]
    collaborators.cart_repo.clear.assert_not_called()


def test_cart_is_claimed_then_cleared(service, collaborators, dto):
    service.checkout(1, dto)

    collaborators.cart_repo.claim.assert_called_once_with(collaborators.cart)
    collaborators.cart_repo.clear.assert_called_once_with(collaborators.cart)
