# app/schemas/storage.py
from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.models.check_in import MAX_PHOTOS


class UploadUrlRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    file_names: list[str] = Field(min_length=1, max_length=MAX_PHOTOS)

    @field_validator("file_names")
    @classmethod
    def not_blank(cls, v: list[str]) -> list[str]:
        if any(not name.strip() for name in v):
            raise ValueError("file name cannot be empty")
        return v


class SignedUploadRead(SQLModel):
    path: str
    signed_url: str
    token: str
