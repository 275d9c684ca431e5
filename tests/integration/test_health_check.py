from __future__ import annotations

from unittest.mock import patch

import pytest

pytestmark = pytest.mark.integration


def test_health_is_public_and_healthy(api_client):
    response = api_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["database"]["status"] == "up"
    assert body["services"]["cache"]["status"] == "up"


def test_cache_outage_reports_unhealthy(api_client):
    with patch("modules.core.views._probe_cache", side_effect=ConnectionError("refused")):
        response = api_client.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "unhealthy"
    assert body["services"]["cache"] == {"status": "down"}


class TestMe:
    def test_customer_role(self, customer_client, customer_user):
        body = customer_client.get("/api/v1/me").json()

        assert body == {"user_id": customer_user.pk, "username": "ayesha", "role": "customer"}

    def test_staff_is_operator(self, operator_client):
        assert operator_client.get("/api/v1/me").json()["role"] == "operator"

    def test_requires_authentication(self, api_client):
        assert api_client.get("/api/v1/me").status_code == 401
