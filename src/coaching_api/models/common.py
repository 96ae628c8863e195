"""Shared API request/response models.

Domain models (Booking, BlockBooking, RefundPolicy, etc.) live in
coaching_core.models and are embedded in request bodies as they are. The API
holds no state, so every request carries the entities it acts on and the
response carries their next state.
"""

import datetime as dt

from pydantic import BaseModel, Field

# Re-export ToolError for convenience - this is the standard error format
from coaching_core.models.errors import ErrorCode, ToolError

__all__ = [
    "ClockedRequest",
    "ErrorCode",
    "ToolError",
]


class ClockedRequest(BaseModel):
    """Base for requests whose outcome depends on the current time."""

    now: dt.datetime | None = Field(
        default=None,
        description="Evaluation time (ISO 8601); defaults to the server's current UTC time",
        examples=["2025-06-01T09:00:00Z"],
    )

    def resolved_now(self) -> dt.datetime:
        """The evaluation time, falling back to now (UTC)."""
        return self.now or dt.datetime.now(dt.UTC)
