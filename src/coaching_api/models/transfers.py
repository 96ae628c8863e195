"""API models for session transfer endpoints."""

from pydantic import BaseModel, Field

from coaching_core.models import Booking, Session, TransferOption

from .common import ClockedRequest


class TransferRequest(ClockedRequest):
    """Move a booking from one session to another."""

    booking: Booking
    current_session: Session
    target_session: Session
    child_age: int | None = Field(default=None, ge=0, description="Checked against the target's age range")


class TransferOptionsRequest(ClockedRequest):
    """List the sessions a booking could move to."""

    current_session: Session
    candidates: list[Session] = Field(default_factory=list)
    child_age: int | None = Field(default=None, ge=0)


class TransferOptionsResponse(BaseModel):
    """Eligible sessions ordered by weekday then start time."""

    options: list[TransferOption]
