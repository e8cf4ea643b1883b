"""Message-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from staylink.db.time import as_utc


class MessageCreate(BaseModel):
    """Schema for sending a message over REST."""

    recipient: int = Field(..., description="Recipient user ID")
    content: str = Field(..., description="Plaintext message content")
    listing: int = Field(..., description="Listing the conversation is about")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        """Reject content that is empty after trimming whitespace."""
        if not value.strip():
            raise ValueError("content must not be empty")
        return value


class UserSummary(BaseModel):
    """Display fields of a message participant."""

    id: int
    name: str
    avatar: str | None = None

    model_config = ConfigDict(from_attributes=True)


class MessageRead(BaseModel):
    """Decrypted message returned by the API."""

    id: int
    sender: UserSummary
    recipient: UserSummary
    listing: int | None
    content: str
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
