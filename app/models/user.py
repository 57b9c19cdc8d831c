# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

COACH = "COACH"
CLIENT = "CLIENT"


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    Capabilities:
      - is_coach / is_client say what the person may act as
      - active_role is the one mode they are currently acting in
        ("COACH" | "CLIENT"); it must be one of their capabilities

    This table is *not* responsible for password hashes. Supabase Auth
    stores the password in its own schema.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from Supabase auth.users",
    )

    name: str = Field(
        max_length=50,
        description="Display name; first part of email by default",
    )

    is_coach: bool = Field(default=False)
    is_client: bool = Field(default=True)

    active_role: str = Field(
        default=CLIENT,
        index=True,
        description="Active mode: COACH | CLIENT",
    )

    # IANA name, e.g. "Europe/Berlin". None => DEFAULT_TIMEZONE.
    timezone: str | None = Field(default=None, max_length=64)

    # Coach default cadence, weekday indices 0=Sun..6=Sat
    check_in_days_of_week: list[int] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
    )

    coach_code: str | None = Field(
        default=None,
        unique=True,
        index=True,
        max_length=10,
        description="Code clients redeem to connect to this coach",
    )

    # Email preferences
    email_check_in_reminders: bool = Field(default=True)
    email_meal_plan_updates: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    @property
    def capabilities(self) -> frozenset[str]:
        caps = set()
        if self.is_coach:
            caps.add(COACH)
        if self.is_client:
            caps.add(CLIENT)
        return frozenset(caps)

    def can_act_as(self, role: str) -> bool:
        return role in self.capabilities
