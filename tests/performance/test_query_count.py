"""Query-count regression tests (N+1 prevention).

List and retrieve endpoints must run a bounded number of queries however
many orders and items exist; the repository prefetches items and history.
"""

from __future__ import annotations

import pytest

from modules.cart.dtos import AddCartLineDTO


@pytest.fixture()
def orders_with_items(customer_user, cart_service, checkout_service, checkout_dto, make_product):
    products = [make_product(name=f"Product {i}", stock=100) for i in range(3)]
    orders = []
    for _ in range(10):
        for product in products:
            cart_service.add_line(
                customer_user.pk, AddCartLineDTO(product_id=product.id, size="M")
            )
        orders.append(checkout_service.checkout(customer_user.pk, checkout_dto))
    return orders


class TestOrderListQueryCount:
    def test_list_query_count_is_constant(
        self, customer_client, orders_with_items, django_assert_max_num_queries
    ):
        """COUNT, orders page, items prefetch, history prefetch."""
        with django_assert_max_num_queries(5):
            response = customer_client.get("/api/v1/orders/")

        assert response.status_code == 200
        assert response.json()["total"] == 10

    def test_admin_list_query_count_is_constant(
        self, operator_client, orders_with_items, django_assert_max_num_queries
    ):
        with django_assert_max_num_queries(5):
            response = operator_client.get("/api/v1/admin/orders/")

        assert response.json()["total"] == 10


class TestOrderRetrieveQueryCount:
    def test_retrieve_query_count_is_constant(
        self, customer_client, orders_with_items, django_assert_max_num_queries
    ):
        order = orders_with_items[0]

        with django_assert_max_num_queries(4):
            response = customer_client.get(f"/api/v1/orders/{order.id}/")

        assert response.status_code == 200
        assert len(response.json()["items"]) == 3
