"""Every error response shares the ``{"type", "errors"}`` envelope."""

from __future__ import annotations

import uuid

import pytest

pytestmark = pytest.mark.integration


def _assert_envelope(body):
    assert set(body) == {"type", "errors"}
    for error in body["errors"]:
        assert set(error) == {"code", "detail", "attr"}


def test_not_authenticated(api_client):
    response = api_client.get("/api/v1/orders/")

    assert response.status_code == 401
    body = response.json()
    _assert_envelope(body)
    assert body["type"] == "client_error"
    assert body["errors"][0]["code"] == "not_authenticated"


def test_domain_not_found(customer_client):
    response = customer_client.get(f"/api/v1/orders/{uuid.uuid4()}/")

    assert response.status_code == 404
    body = response.json()
    _assert_envelope(body)
    assert body["errors"][0]["code"] == "order_not_found"
    assert body["errors"][0]["attr"] is None


def test_validation_error_points_at_field(customer_client):
    response = customer_client.post("/api/v1/cart/", {"size": "M"}, format="json")

    body = response.json()
    _assert_envelope(body)
    assert body["type"] == "validation_error"
    assert body["errors"][0]["attr"] == "product_id"


def test_method_not_allowed(customer_client):
    response = customer_client.put("/api/v1/cart/", {}, format="json")

    assert response.status_code == 405
    _assert_envelope(response.json())
