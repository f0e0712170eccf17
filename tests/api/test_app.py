# tests/api/test_app.py
"""
Тесты HTTP API на движке в памяти.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from cashlink.api import create_app
from cashlink.api.dependencies import build_memory_engine
from cashlink.core.providers.directory import InMemoryProviderDirectory

CUSTOMER = {"X-User-Id": "customer-1"}
AGENT = {"X-User-Id": "agent-1"}
DRIVER = {"X-User-Id": "driver-1"}


@pytest.fixture
def client(directory: InMemoryProviderDirectory, mock_event_bus: AsyncMock) -> TestClient:
    app = create_app(build_memory_engine(directory, mock_event_bus))
    with TestClient(app) as test_client:
        yield test_client


def create_transaction(client: TestClient, amount: str = "500") -> dict:
    response = client.post(
        "/api/v1/transactions/",
        json={"provider_id": "agent-1", "service_type": "cash_to_mobile", "amount": amount},
        headers=CUSTOMER,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestTransactionsApi:
    """Обмен наличных через HTTP."""

    def test_create(self, client: TestClient) -> None:
        body = create_transaction(client)

        assert body["status"] == "pending"
        assert body["fee_amount"] == "10.00"
        assert body["customer_id"] == "customer-1"

    def test_amount_below_limit(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/transactions/",
            json={"provider_id": "agent-1", "service_type": "cash_to_mobile", "amount": "5"},
            headers=CUSTOMER,
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "amount_out_of_range"

    def test_sub_cent_amount_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/transactions/",
            json={"provider_id": "agent-1", "service_type": "cash_to_mobile", "amount": "100.005"},
            headers=CUSTOMER,
        )

        assert response.status_code == 422

    def test_missing_user_header(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/transactions/",
            json={"provider_id": "agent-1", "service_type": "cash_to_mobile", "amount": "500"},
        )

        assert response.status_code == 422

    def test_unknown_provider(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/transactions/",
            json={"provider_id": "ghost", "service_type": "cash_to_mobile", "amount": "500"},
            headers=CUSTOMER,
        )

        assert response.status_code == 404

    def test_dual_confirmation(self, client: TestClient) -> None:
        tx_id = create_transaction(client)["id"]

        first = client.post(f"/api/v1/transactions/{tx_id}/customer-confirm", headers=CUSTOMER).json()
        second = client.post(f"/api/v1/transactions/{tx_id}/agent-confirm", headers=AGENT).json()
        repeat = client.post(f"/api/v1/transactions/{tx_id}/agent-confirm", headers=AGENT).json()

        assert first["new_status"] == "pending"
        assert second["old_status"] == "pending"
        assert second["new_status"] == "completed"
        assert second["record"]["confirmed_at"] is not None
        assert repeat["changed"] is False

    def test_stranger_forbidden(self, client: TestClient) -> None:
        tx_id = create_transaction(client)["id"]

        response = client.get(f"/api/v1/transactions/{tx_id}", headers={"X-User-Id": "stranger"})

        assert response.status_code == 403

    def test_confirm_after_cancel_conflict(self, client: TestClient) -> None:
        tx_id = create_transaction(client)["id"]
        client.post(f"/api/v1/transactions/{tx_id}/cancel", json={"reason": "передумал"}, headers=CUSTOMER)

        response = client.post(f"/api/v1/transactions/{tx_id}/agent-confirm", headers=AGENT)

        assert response.status_code == 409
        assert response.json()["error_code"] == "not_pending"

    def test_reject_without_body(self, client: TestClient) -> None:
        tx_id = create_transaction(client)["id"]

        response = client.post(f"/api/v1/transactions/{tx_id}/reject", headers=AGENT)

        assert response.status_code == 200
        assert response.json()["new_status"] == "rejected"

    def test_lists(self, client: TestClient) -> None:
        create_transaction(client)

        mine = client.get("/api/v1/transactions/mine", headers=CUSTOMER).json()
        incoming = client.get("/api/v1/transactions/incoming?status=pending", headers=AGENT).json()

        assert len(mine) == 1
        assert len(incoming) == 1

    def test_missing_record(self, client: TestClient) -> None:
        response = client.get("/api/v1/transactions/missing", headers=CUSTOMER)

        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"


class TestRidesApi:
    """Поездки через HTTP."""

    def create_ride(self, client: TestClient) -> dict:
        response = client.post(
            "/api/v1/rides/",
            json={
                "driver_id": "driver-1",
                "service_type": "city_ride",
                "pickup_location": "Dubai Mall",
                "distance_km": "10",
            },
            headers=CUSTOMER,
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_lifecycle(self, client: TestClient) -> None:
        ride_id = self.create_ride(client)["id"]

        for action in ("accept", "start", "complete"):
            response = client.post(f"/api/v1/rides/{ride_id}/{action}", headers=DRIVER)
            assert response.status_code == 200, response.text

        assert response.json()["record"]["status"] == "completed"

    def test_complete_with_rating(self, client: TestClient) -> None:
        ride_id = self.create_ride(client)["id"]
        for action in ("accept", "start"):
            client.post(f"/api/v1/rides/{ride_id}/{action}", headers=DRIVER)

        invalid = client.post(f"/api/v1/rides/{ride_id}/complete", json={"driver_rating": 6}, headers=DRIVER)
        response = client.post(f"/api/v1/rides/{ride_id}/complete", json={"driver_rating": 5}, headers=DRIVER)

        assert invalid.status_code == 422
        assert response.status_code == 200, response.text
        assert response.json()["record"]["driver_rating"] == 5

    def test_skip_accept_conflict(self, client: TestClient) -> None:
        ride_id = self.create_ride(client)["id"]

        response = client.post(f"/api/v1/rides/{ride_id}/start", headers=DRIVER)

        assert response.status_code == 409

    def test_customer_cannot_accept(self, client: TestClient) -> None:
        ride_id = self.create_ride(client)["id"]

        response = client.post(f"/api/v1/rides/{ride_id}/accept", headers=CUSTOMER)

        assert response.status_code == 403

    def test_active_for_driver(self, client: TestClient) -> None:
        self.create_ride(client)

        response = client.get("/api/v1/rides/active", headers=DRIVER)

        assert len(response.json()) == 1


class TestStatsAndNearby:
    """Статистика и поиск поблизости."""

    def test_stats(self, client: TestClient) -> None:
        create_transaction(client)

        body = client.get("/api/v1/stats/agent?period=all", headers=AGENT).json()

        assert body["total_count"] == 1
        assert body["pending_count"] == 1
        assert len(body["daily"]) == 7

    def test_nearby(self, client: TestClient) -> None:
        response = client.get("/api/v1/nearby/driver?lat=25.2&lng=55.3&radius_km=5")

        assert response.status_code == 200
        assert [p["provider_id"] for p in response.json()] == ["driver-1"]

    def test_nearby_radius_too_large(self, client: TestClient) -> None:
        response = client.get("/api/v1/nearby/agent?lat=25.2&lng=55.3&radius_km=500")

        assert response.status_code == 422
        assert response.json()["error_code"] == "validation_error"
