# app/schemas/check_in.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.core.calendar import parse_week_start_string
from app.core.errors import InvalidDateError
from app.models.check_in import MAX_PHOTOS

CheckInStatus = Literal["SUBMITTED", "REVIEWED"]

# How to handle a second submission on a day that already has one
Resolution = Literal["overwrite", "add_new"]


class CheckInCreate(SQLModel):
    """
    Payload for submitting a check-in.

    User provides:
      - optional metrics (weight, diet compliance, energy) and notes
      - up to 3 photo storage paths obtained from /storage/upload-urls
      - optionally the week (any "YYYY-MM-DD" inside it)
      - resolution, only when answering a previous conflict

    Backend derives:
      - client_id from token
      - submitted_at from the clock
      - local_date / timezone from the client's profile
      - week_of (Monday of the local date) unless given
    """

    model_config = ConfigDict(extra="forbid")

    weight: float | None = Field(default=None, gt=0, le=1500)
    diet_compliance: int | None = Field(default=None, ge=1, le=10)
    energy_level: int | None = Field(default=None, ge=1, le=10)
    notes: str | None = Field(default=None, max_length=5000)
    photo_paths: list[str] = Field(default_factory=list, max_length=MAX_PHOTOS)
    week_of: str | None = None
    resolution: Resolution | None = None

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @field_validator("week_of")
    @classmethod
    def check_week_of(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip()
        try:
            parse_week_start_string(v)
        except InvalidDateError:
            raise ValueError("Invalid date")
        return v

    @field_validator("photo_paths")
    @classmethod
    def check_photo_paths(cls, v: list[str]) -> list[str]:
        if len(v) > MAX_PHOTOS:
            raise ValueError(f"at most {MAX_PHOTOS} photos per check-in")
        cleaned = [p.strip() for p in v]
        if any(not p for p in cleaned):
            raise ValueError("photo path cannot be empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("duplicate photo path")
        return cleaned


class ConflictRead(SQLModel):
    """Existing same-day check-in the caller must decide about."""

    existing_id: uuid.UUID
    existing_submitted_at: datetime
    local_date: str


class CheckInSubmitResult(SQLModel):
    """
    Outcome of a submission.

    Exactly one of:
      - conflict set (nothing was written)
      - check_in_id set, with overwritten / revived / added_as_new
        describing how the row was produced
    """

    check_in_id: uuid.UUID | None = None
    overwritten: bool = False
    revived: bool = False
    added_as_new: bool = False
    conflict: ConflictRead | None = None


class CheckInPhotoRead(SQLModel):
    id: uuid.UUID
    storage_path: str
    sort_order: int
    url: str | None = None


class CheckInRead(SQLModel):
    id: uuid.UUID
    client_id: uuid.UUID
    week_of: datetime
    submitted_at: datetime
    local_date: str
    timezone: str
    weight: float | None
    diet_compliance: int | None
    energy_level: int | None
    notes: str | None
    status: CheckInStatus
    added_as_new: bool
    photo_count: int = 0


class CheckInDetailRead(CheckInRead):
    photos: list[CheckInPhotoRead]


class TodayStatusRead(SQLModel):
    local_date: str
    exists_today: bool
    count_today: int
    latest_id: uuid.UUID | None = None
    latest_submitted_at: datetime | None = None


WeightRange = Literal["30d", "90d", "all"]


class WeightPointRead(SQLModel):
    """One point of the weight progress chart."""

    local_date: date
    label: str
    weight: float


class PeriodRead(SQLModel):
    period_start: date
    period_end: date
    scheduled_weekdays: list[int]
    label: str


class PeriodStatusRead(SQLModel):
    """Where a client stands in their current check-in period."""

    client_id: uuid.UUID
    timezone: str
    today: date
    period: PeriodRead
    checked_in_today: bool
    has_check_in_in_period: bool
    due_today: bool
    overdue: bool
