"""Unit tests for environment-driven settings."""

import pytest

from coaching_core.config import get_settings, reset_settings
from coaching_core.models import RefundRule


class TestSettings:
    """Tests for get_settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "COACHING_EXPIRING_SOON_DAYS",
            "COACHING_DEFAULT_REFUND_POLICY",
            "LOG_LEVEL",
            "CORS_ORIGINS",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = get_settings()

        assert settings.expiring_soon_days == 30
        assert settings.default_refund_rules is None
        assert settings.log_level == "INFO"
        assert "http://localhost:3000" in settings.cors_origins

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COACHING_EXPIRING_SOON_DAYS", "14")
        monkeypatch.setenv(
            "COACHING_DEFAULT_REFUND_POLICY",
            '[{"days_before_session": 5, "refund_percentage": 100},'
            ' {"days_before_session": 0, "refund_percentage": 0}]',
        )
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CORS_ORIGINS", "https://coach.example.com, https://admin.example.com")

        settings = get_settings()

        assert settings.expiring_soon_days == 14
        assert settings.default_refund_rules == [
            RefundRule(days_before_session=5, refund_percentage=100),
            RefundRule(days_before_session=0, refund_percentage=0),
        ]
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["https://coach.example.com", "https://admin.example.com"]

    def test_cached_until_reset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COACHING_EXPIRING_SOON_DAYS", "10")
        first = get_settings()
        monkeypatch.setenv("COACHING_EXPIRING_SOON_DAYS", "20")

        assert get_settings() is first

        reset_settings()
        assert get_settings().expiring_soon_days == 20
