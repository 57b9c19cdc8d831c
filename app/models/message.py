# app/models/message.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Message(SQLModel, table=True):
    """
    Coach/client message on a client's weekly thread.

    Threads are keyed by (client_id, week_of). sender_id is either the
    client or one of their coaches.
    """

    __tablename__ = "messages"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    client_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    sender_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    week_of: datetime = Field(index=True)

    body: str = Field(max_length=5000)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
