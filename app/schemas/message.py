# app/schemas/message.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class MessageCreate(SQLModel):
    """
    Post a message on a client's weekly thread.

    week_start_date is any "YYYY-MM-DD" in the week; it is normalized to
    that week's Monday.
    """

    model_config = ConfigDict(extra="forbid")

    client_id: uuid.UUID
    week_start_date: str = Field(min_length=1, max_length=20)
    body: str = Field(min_length=1, max_length=5000)

    @field_validator("body")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty")
        return v


class MessageRead(SQLModel):
    id: uuid.UUID
    client_id: uuid.UUID
    sender_id: uuid.UUID
    week_of: datetime
    body: str
    created_at: datetime
