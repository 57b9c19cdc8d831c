# app/models/coach_client.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import SQLModel, Field


class CoachClient(SQLModel, table=True):
    """
    Link between a coach and one of their clients.

    At most one row per (coach_id, client_id). Deleting the link does not
    touch the client's check-ins or messages.
    """

    __tablename__ = "coach_clients"
    __table_args__ = (
        UniqueConstraint("coach_id", "client_id", name="uq_coach_clients_pair"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    coach_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    client_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # Empty list => no override, the coach's default cadence applies
    check_in_days_of_week_override: list[int] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
    )

    coach_notes: str | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
