# app/schemas/coach_client.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.check_in import CheckInRead
from app.schemas.user import normalize_weekdays


class ConnectRequest(SQLModel):
    """Client redeems a coach code."""

    model_config = ConfigDict(extra="forbid")

    coach_code: str = Field(min_length=1, max_length=10)

    @field_validator("coach_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Please enter a valid coach code.")
        return v


class ConnectionRead(SQLModel):
    """A client's view of one of their coaches."""

    id: uuid.UUID
    coach_id: uuid.UUID
    coach_name: str
    coach_email: str
    created_at: datetime


class LinkRead(SQLModel):
    """A coach's view of a client link."""

    id: uuid.UUID
    coach_id: uuid.UUID
    client_id: uuid.UUID
    check_in_days_of_week_override: list[int]
    effective_check_in_days: list[int]
    coach_notes: str | None
    created_at: datetime


class ClientProfileRead(LinkRead):
    """
    Coach's client page: the link plus a recent-activity summary.

      - recent_check_ins : latest 4 non-deleted check-ins, newest first
      - weight_change    : latest minus previous weight (when both logged)
      - last_message_at  : newest message on any of the client's threads
    """

    recent_check_ins: list[CheckInRead]
    weight_change: float | None = None
    last_message_at: datetime | None = None


class ClientScheduleUpdate(SQLModel):
    """Empty list clears the override (coach default applies again)."""

    model_config = ConfigDict(extra="forbid")

    check_in_days_of_week: list[int] = Field(default_factory=list, max_length=7)

    @field_validator("check_in_days_of_week")
    @classmethod
    def check_days(cls, v: list[int]) -> list[int]:
        return normalize_weekdays(v)


class CoachNotesUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    notes: str = Field(max_length=10000)
