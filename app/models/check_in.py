# app/models/check_in.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field

SUBMITTED = "SUBMITTED"
REVIEWED = "REVIEWED"

MAX_PHOTOS = 3


class CheckIn(SQLModel, table=True):
    """
    One client check-in submission.

    Dedup key:
      - (client_id, local_date) among rows with deleted_at IS NULL.
        Rows created through an explicit "add as new" decision
        (added_as_new=True) are exempt, so the partial unique index
        only covers the regular entry of each day.

    week_of is the legacy Monday grouping key and is kept for
    week-based views (coach review, message threads).

    Status lifecycle: SUBMITTED -> REVIEWED (coach only). A resubmission
    (overwrite / revive) puts the row back to SUBMITTED.
    """

    __tablename__ = "check_ins"
    __table_args__ = (
        Index(
            "uq_check_ins_client_local_date_active",
            "client_id",
            "local_date",
            unique=True,
            sqlite_where=text("deleted_at IS NULL AND added_as_new = 0"),
            postgresql_where=text("deleted_at IS NULL AND NOT added_as_new"),
        ),
        Index("ix_check_ins_client_submitted", "client_id", "submitted_at"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    client_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    week_of: datetime = Field(
        index=True,
        description="Monday 00:00 UTC of the check-in week",
    )

    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    local_date: str = Field(
        max_length=10,
        description="YYYY-MM-DD of submitted_at in the client's timezone",
    )

    timezone: str = Field(
        max_length=64,
        description="Timezone used to derive local_date",
    )

    weight: float | None = Field(default=None, gt=0)
    diet_compliance: int | None = Field(default=None, ge=1, le=10)
    energy_level: int | None = Field(default=None, ge=1, le=10)
    notes: str | None = Field(default=None)

    status: str = Field(
        default=SUBMITTED,
        index=True,
        description="SUBMITTED | REVIEWED",
    )

    added_as_new: bool = Field(
        default=False,
        description="Second entry for a day the client already checked in",
    )

    deleted_at: datetime | None = Field(default=None, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CheckInPhoto(SQLModel, table=True):
    """
    Photo attached to a check-in.

    Only the storage object path is persisted; URLs are signed on read.
    """

    __tablename__ = "check_in_photos"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    check_in_id: uuid.UUID = Field(
        foreign_key="check_ins.id",
        index=True,
    )

    storage_path: str = Field(max_length=500)

    sort_order: int = Field(default=0, ge=0)
