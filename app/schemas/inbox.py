# app/schemas/inbox.py
import uuid
from datetime import date, datetime
from typing import Literal

from sqlmodel import SQLModel

from app.schemas.check_in import CheckInDetailRead, PeriodRead
from app.schemas.message import MessageRead

InboxStatus = Literal["new", "reviewed", "missing"]


class InboxClientRead(SQLModel):
    """One roster row on the coach inbox."""

    id: uuid.UUID
    name: str
    email: str
    status: InboxStatus
    period: PeriodRead
    has_client_message: bool
    check_in_id: uuid.UUID | None
    weight: float | None
    weight_change: float | None
    diet_compliance: int | None
    energy_level: int | None
    submitted_at: datetime | None


class InboxCounts(SQLModel):
    new: int = 0
    reviewed: int = 0
    missing: int = 0


class InboxRead(SQLModel):
    clients: list[InboxClientRead]
    counts: InboxCounts


class WeekReviewRead(SQLModel):
    """Everything a coach sees when reviewing one client week."""

    client_id: uuid.UUID
    week_of: date
    week_end: datetime
    check_ins: list[CheckInDetailRead]
    messages: list[MessageRead]
