# app/models/notification_log.py
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

CHECKIN_REMINDER = "CHECKIN_REMINDER"
MEAL_PLAN_UPDATE = "MEAL_PLAN_UPDATE"

# Reminder stages
DUE_SOON = "DUE_SOON"
OVERDUE = "OVERDUE"


class NotificationLog(SQLModel, table=True):
    """
    Record of an email that was sent.

    The unique constraint makes reminder batches idempotent: one
    reminder per client, period start and stage.
    """

    __tablename__ = "notification_logs"
    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "window_start_date",
            "stage",
            name="uq_notification_logs_reminder",
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    type: str = Field(description="CHECKIN_REMINDER | MEAL_PLAN_UPDATE")

    client_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    window_start_date: date | None = Field(default=None)
    stage: str | None = Field(default=None, description="DUE_SOON | OVERDUE")

    sent_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
