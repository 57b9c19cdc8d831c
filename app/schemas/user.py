# app/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.core.calendar import is_valid_timezone

# Active modes. A user may hold one or both capabilities.
Role = Literal["COACH", "CLIENT"]


def normalize_weekdays(days: list[int]) -> list[int]:
    """Validate 0=Sun..6=Sat indices; drop duplicates and sort."""
    for day in days:
        if day < 0 or day > 6:
            raise ValueError("weekday must be between 0 (Sunday) and 6 (Saturday)")
    return sorted(set(days))


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: EmailStr
    name: str
    is_coach: bool
    is_client: bool
    active_role: Role
    timezone: str | None
    check_in_days_of_week: list[int]
    coach_code: str | None
    email_check_in_reminders: bool
    email_meal_plan_updates: bool
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.

    Editable: display name and IANA timezone.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=50)
    timezone: str | None = Field(default=None, max_length=64)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not is_valid_timezone(v):
            raise ValueError(f"unknown timezone: {v}")
        return v


class RoleSwitch(SQLModel):
    model_config = ConfigDict(extra="forbid")

    role: Role


class BecomeCoachRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    access_code: str = Field(min_length=1, max_length=200)


class ScheduleUpdate(SQLModel):
    """
    Coach default check-in days (0=Sun..6=Sat).

    An empty list means "no preference"; clients then fall back to Monday.
    """

    model_config = ConfigDict(extra="forbid")

    check_in_days_of_week: list[int] = Field(default_factory=list, max_length=7)

    @field_validator("check_in_days_of_week")
    @classmethod
    def check_days(cls, v: list[int]) -> list[int]:
        return normalize_weekdays(v)


class NotificationPreferencesUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email_check_in_reminders: bool | None = None
    email_meal_plan_updates: bool | None = None


class CoachCodeRead(SQLModel):
    coach_code: str
