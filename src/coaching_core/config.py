"""Runtime configuration read from environment variables.

Variables:
    COACHING_EXPIRING_SOON_DAYS: window for flagging packages about to expire (default 30)
    COACHING_DEFAULT_REFUND_POLICY: JSON list of {"days_before_session", "refund_percentage"}
        overriding the built-in default policy
    LOG_LEVEL: root log level (default INFO)
    CORS_ORIGINS: comma separated origins allowed by the API
"""

import json
import os
from functools import lru_cache

from pydantic import BaseModel, Field

from coaching_core.models.refund_policy import RefundRule


class CoreSettings(BaseModel):
    """Settings shared by the core services and the API."""

    expiring_soon_days: int = Field(default=30, ge=0)
    default_refund_rules: list[RefundRule] | None = None
    log_level: str = "INFO"
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )


def _load_refund_rules(raw: str | None) -> list[RefundRule] | None:
    if not raw:
        return None
    return [RefundRule.model_validate(rule) for rule in json.loads(raw)]


@lru_cache
def get_settings() -> CoreSettings:
    """Get cached settings instance built from the environment."""
    values: dict[str, object] = {
        "expiring_soon_days": int(os.getenv("COACHING_EXPIRING_SOON_DAYS", "30")),
        "default_refund_rules": _load_refund_rules(os.getenv("COACHING_DEFAULT_REFUND_POLICY")),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }
    origins = os.getenv("CORS_ORIGINS")
    if origins:
        values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    return CoreSettings.model_validate(values)


def reset_settings() -> None:
    """Clear the cached settings (for tests)."""
    get_settings.cache_clear()
