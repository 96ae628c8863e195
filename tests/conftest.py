"""Pytest configuration and fixtures for coaching bookings tests.

This module provides reusable fixtures for testing:
- A fixed clock so day counts are deterministic
- Factories for sessions, bookings and block bookings
- Cache resets for settings and API service singletons
"""

import datetime as dt
from collections.abc import Callable, Generator
from typing import Any

import pytest

from coaching_core.config import reset_settings
from coaching_core.models import (
    BlockBooking,
    BlockBookingStatus,
    Booking,
    BookingStatus,
    PaymentStatus,
    Session,
)

NOW = dt.datetime(2025, 6, 1, 9, 0, tzinfo=dt.UTC)


# === Cache Fixtures ===


@pytest.fixture(autouse=True)
def reset_cached_singletons() -> Generator[None, None, None]:
    """Reset cached settings and services before and after each test.

    Tests that patch environment variables get a fresh settings object
    instead of one cached by an earlier test.
    """
    from coaching_api.dependencies import reset_services

    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


# === Clock ===


@pytest.fixture
def now() -> dt.datetime:
    """Fixed evaluation time: 2025-06-01 09:00 UTC."""
    return NOW


# === Entity Factories ===


@pytest.fixture
def make_session() -> Callable[..., Session]:
    """Factory for sessions starting ten days after NOW by default."""

    def _make(**overrides: Any) -> Session:
        values: dict[str, Any] = {
            "session_id": "S-1",
            "name": "Saturday Football",
            "price": 10000,
            "start_date": NOW + dt.timedelta(days=10),
            "day_of_week": 6,
            "start_time": "10:00",
            "capacity": 12,
            "enrolled": 4,
            "age_min": 5,
            "age_max": 8,
            "service_type": "weekly-class",
        }
        values.update(overrides)
        return Session(**values)

    return _make


@pytest.fixture
def make_booking() -> Callable[..., Booking]:
    """Factory for confirmed, paid bookings in session S-1."""

    def _make(**overrides: Any) -> Booking:
        values: dict[str, Any] = {
            "booking_id": "B-1",
            "session_id": "S-1",
            "child_id": "C-1",
            "parent_id": "P-1",
            "amount": 10000,
            "payment_status": PaymentStatus.PAID,
            "status": BookingStatus.CONFIRMED,
        }
        values.update(overrides)
        return Booking(**values)

    return _make


@pytest.fixture
def make_block_booking() -> Callable[..., BlockBooking]:
    """Factory for an active 10-session package bought for £100."""

    def _make(**overrides: Any) -> BlockBooking:
        values: dict[str, Any] = {
            "block_booking_id": "BB-1",
            "student_name": "Sam Smith",
            "parent_name": "Alex Smith",
            "parent_email": "alex@example.com",
            "total_sessions": 10,
            "total_paid": 10000,
            "price_per_session": 1000,
            "status": BlockBookingStatus.ACTIVE,
            "purchased_at": NOW - dt.timedelta(days=30),
            "expires_at": NOW + dt.timedelta(days=90),
        }
        values.update(overrides)
        return BlockBooking(**values)

    return _make
