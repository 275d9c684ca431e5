from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration


def test_jwt_token_grants_access(api_client, customer_user):
    token = api_client.post(
        "/api/v1/auth/token/",
        {"username": "ayesha", "password": "pass12345"},
        format="json",
    ).json()["access"]

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    response = api_client.get("/api/v1/cart/")

    assert response.status_code == 200


def test_bad_token_is_rejected(api_client):
    api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")

    assert api_client.get("/api/v1/cart/").status_code == 401


def test_openapi_schema_is_public(api_client):
    response = api_client.get("/api/schema/")

    assert response.status_code == 200
