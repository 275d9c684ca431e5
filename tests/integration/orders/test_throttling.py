"""Scoped throttling on the order endpoints."""

from __future__ import annotations

import pytest
from django.core.cache import cache
from rest_framework.throttling import ScopedRateThrottle

from modules.orders.views import OrderViewSet

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _scoped_throttling(monkeypatch):
    monkeypatch.setattr(OrderViewSet, "throttle_classes", [ScopedRateThrottle])
    cache.clear()
    yield
    cache.clear()


def test_checkout_is_throttled(customer_client, make_product, address_payload):
    product = make_product(stock=10)
    payload = {"shipping_address": address_payload}

    for _ in range(5):
        customer_client.post(
            "/api/v1/cart/", {"product_id": str(product.id), "size": "M"}, format="json"
        )
        response = customer_client.post("/api/v1/orders/", payload, format="json")
        assert response.status_code == 201

    response = customer_client.post("/api/v1/orders/", payload, format="json")

    assert response.status_code == 429
    assert response.json()["errors"][0]["code"] == "throttled"


def test_order_listing_has_higher_limit(customer_client):
    for _ in range(10):
        assert customer_client.get("/api/v1/orders/").status_code == 200
