"""Unit tests for block booking API routes.

Tests for:
- POST /api/block-bookings - Purchase
- POST /api/block-bookings/deduct
- POST /api/block-bookings/refund
- POST /api/block-bookings/cancel
- POST /api/block-bookings/expire
- POST /api/block-bookings/summary
"""

import datetime as dt
from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient
from starlette.status import (
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
)

from coaching_api.main import app
from coaching_core.models import BlockBooking

NOW = "2025-06-01T09:00:00Z"


@pytest.fixture
def client() -> TestClient:
    """Create test client for API."""
    return TestClient(app)


@pytest.fixture
def block_json(make_block_booking: Callable[..., BlockBooking]) -> Callable[..., dict[str, Any]]:
    """JSON body for a stored package."""

    def _make(**overrides: Any) -> dict[str, Any]:
        return make_block_booking(**overrides).model_dump(mode="json")

    return _make


class TestPurchase:
    """Tests for POST /api/block-bookings."""

    def test_creates_active_package(self, client: TestClient) -> None:
        response = client.post(
            "/api/block-bookings",
            json={
                "block_booking": {
                    "block_booking_id": "BB-7",
                    "student_name": "Sam",
                    "parent_email": "alex@example.com",
                    "total_sessions": 4,
                    "total_paid": 5000,
                    "payment_method": "cash",
                },
                "now": NOW,
            },
        )

        assert response.status_code == HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "active"
        assert data["price_per_session"] == 1250
        assert data["remaining_sessions"] == 4
        assert data["purchased_at"] == NOW

    def test_zero_sessions_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/api/block-bookings",
            json={
                "block_booking": {
                    "block_booking_id": "BB-7",
                    "student_name": "Sam",
                    "total_sessions": 0,
                    "total_paid": 5000,
                },
            },
        )

        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == "ERR_VALIDATION"


class TestDeduct:
    """Tests for POST /api/block-bookings/deduct."""

    def test_deducts_one_session(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        response = client.post(
            "/api/block-bookings/deduct",
            json={"block_booking": block_json(), "usage": {"session_date": "2025-06-01"}, "now": NOW},
        )

        assert response.status_code == HTTP_200_OK
        data = response.json()
        assert data["remaining_sessions"] == 9
        assert data["usage_history"][0]["session_date"] == "2025-06-01"

    def test_duplicate_date_conflicts(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        first = client.post(
            "/api/block-bookings/deduct",
            json={"block_booking": block_json(), "usage": {"session_date": "2025-06-01"}, "now": NOW},
        )

        second = client.post(
            "/api/block-bookings/deduct",
            json={"block_booking": first.json(), "usage": {"session_date": "2025-06-01"}, "now": NOW},
        )

        assert second.status_code == HTTP_409_CONFLICT
        assert second.json()["error_code"] == "ERR_DUPLICATE_USAGE"

    def test_expired_package_conflicts(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        expired = block_json(expires_at=dt.datetime(2025, 5, 1, tzinfo=dt.UTC))

        response = client.post(
            "/api/block-bookings/deduct",
            json={"block_booking": expired, "usage": {"session_date": "2025-06-01"}, "now": NOW},
        )

        assert response.status_code == HTTP_409_CONFLICT
        assert response.json()["error_code"] == "ERR_INVALID_STATUS"


class TestRefund:
    """Tests for POST /api/block-bookings/refund."""

    def test_refund_sessions(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        response = client.post(
            "/api/block-bookings/refund",
            json={"block_booking": block_json(), "refund": {"sessions_to_refund": 3}, "now": NOW},
        )

        assert response.status_code == HTTP_200_OK
        data = response.json()
        assert data["refund"]["amount_refunded"] == 3000
        assert data["block_booking"]["remaining_sessions"] == 7

    def test_over_refund_reports_maximum(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        response = client.post(
            "/api/block-bookings/refund",
            json={"block_booking": block_json(), "refund": {"sessions_to_refund": 11}, "now": NOW},
        )

        assert response.status_code == HTTP_409_CONFLICT
        data = response.json()
        assert data["error_code"] == "ERR_OVER_REFUND"
        assert data["details"] == {"max_refundable": "10000", "max_sessions": "10"}

    def test_refund_everything_by_default(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        response = client.post(
            "/api/block-bookings/refund", json={"block_booking": block_json(), "now": NOW}
        )

        assert response.status_code == HTTP_200_OK
        assert response.json()["block_booking"]["status"] == "refunded"


class TestCancelAndExpire:
    """Tests for admin cancellation, the expiry sweep and summaries."""

    def test_cancel_lapsed_package(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        lapsed = block_json(expires_at=dt.datetime(2025, 5, 1, tzinfo=dt.UTC))

        summary = client.post("/api/block-bookings/summary", json={"block_booking": lapsed, "now": NOW})
        cancelled = client.post("/api/block-bookings/cancel", json={"block_booking": lapsed, "now": NOW})

        assert summary.json()["status"] == "expired"
        assert cancelled.status_code == HTTP_200_OK
        assert cancelled.json()["status"] == "cancelled"

    def test_cancel_twice_conflicts(
        self, client: TestClient, block_json: Callable[..., dict[str, Any]]
    ) -> None:
        response = client.post(
            "/api/block-bookings/cancel",
            json={"block_booking": block_json(status="cancelled"), "now": NOW},
        )

        assert response.status_code == HTTP_409_CONFLICT

    def test_expire(self, client: TestClient, block_json: Callable[..., dict[str, Any]]) -> None:
        lapsed = block_json(expires_at=dt.datetime(2025, 5, 1, tzinfo=dt.UTC))

        response = client.post("/api/block-bookings/expire", json={"block_booking": lapsed, "now": NOW})

        assert response.status_code == HTTP_200_OK
        assert response.json()["status"] == "expired"

    def test_summary(self, client: TestClient, block_json: Callable[..., dict[str, Any]]) -> None:
        response = client.post(
            "/api/block-bookings/summary", json={"block_booking": block_json(), "now": NOW}
        )

        assert response.status_code == HTTP_200_OK
        data = response.json()
        assert data["remaining_sessions"] == 10
        assert data["value_remaining"] == 10000
        assert data["days_until_expiry"] == 90
