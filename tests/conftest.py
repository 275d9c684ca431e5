from __future__ import annotations

from decimal import Decimal
from itertools import count

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.cart.dtos import AddCartLineDTO
from modules.cart.repositories import CartDjangoRepository
from modules.cart.services import CartService
from modules.core.identity import Actor, Role
from modules.orders.dtos import CheckoutDTO, ShippingAddressDTO
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import CheckoutService, OrderService
from modules.products.models import Product, ProductStatus
from modules.products.repositories import ProductDjangoRepository

_sku = count(1)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users & actors
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer_user():
    return get_user_model().objects.create_user("ayesha", password="pass12345")


@pytest.fixture()
def other_user():
    return get_user_model().objects.create_user("bilal", password="pass12345")


@pytest.fixture()
def operator_user():
    return get_user_model().objects.create_user(
        "operator", password="pass12345", is_staff=True
    )


@pytest.fixture()
def customer(customer_user):
    return Actor(user_id=customer_user.pk, role=Role.CUSTOMER)


@pytest.fixture()
def operator(operator_user):
    return Actor(user_id=operator_user.pk, role=Role.OPERATOR)


@pytest.fixture()
def customer_client(customer_user):
    client = APIClient()
    client.force_authenticate(user=customer_user)
    return client


@pytest.fixture()
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


@pytest.fixture()
def operator_client(operator_user):
    client = APIClient()
    client.force_authenticate(user=operator_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    def _make(
        name: str = "Lawn Kurta",
        price: str = "1000.00",
        stock: int = 5,
        status: str = ProductStatus.ACTIVE,
        images: list[str] | None = None,
    ) -> Product:
        return Product.objects.create(
            sku=f"SKU-{next(_sku):04d}",
            name=name,
            price=Decimal(price),
            stock_quantity=stock,
            status=status,
            images=images if images is not None else [f"https://cdn.test/{name}.jpg"],
        )

    return _make


@pytest.fixture()
def product(make_product):
    return make_product()


# ---------------------------------------------------------------------------
# Services (real repositories)
# ---------------------------------------------------------------------------


@pytest.fixture()
def cart_service():
    return CartService(CartDjangoRepository(), ProductDjangoRepository())


@pytest.fixture()
def checkout_service():
    return CheckoutService(
        order_repository=OrderDjangoRepository(),
        cart_repository=CartDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@pytest.fixture()
def order_service():
    return OrderService(order_repository=OrderDjangoRepository())


@pytest.fixture()
def checkout_dto():
    return CheckoutDTO(
        shipping_address=ShippingAddressDTO(
            label="Home", street="House 12, Street 4", city="Lahore", postal_code="54000"
        ),
    )


@pytest.fixture()
def address_payload():
    return {
        "label": "Home",
        "street": "House 12, Street 4",
        "city": "Lahore",
        "postal_code": "54000",
    }


@pytest.fixture()
def place_order(cart_service, checkout_service, checkout_dto, make_product):
    """Put *quantity* of a product in the user's cart and check out."""

    def _place(user_id: int, product: Product | None = None, quantity: int = 1, dto=None):
        product = product or make_product()
        cart_service.add_line(
            user_id,
            AddCartLineDTO(product_id=product.id, quantity=quantity, size="M"),
        )
        return checkout_service.checkout(user_id, dto or checkout_dto)

    return _place
