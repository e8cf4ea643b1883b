"""WebSocket frame schemas.

Two inbound shapes share one channel: an auth frame carrying
``type == "auth"`` and a send frame identified by its recipient/content
fields. Both are decoded once into a tagged union.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)

from staylink.db.time import as_utc


class AuthFrame(BaseModel):
    """Binds the connection to the token's subject."""

    type: Literal["auth"]
    token: str


class SendFrame(BaseModel):
    """Carries one message; authenticated independently of the auth frame."""

    token: str
    recipient: int
    content: str
    listing: int | None = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be empty")
        return value


class DeliveryFrame(BaseModel):
    """Outbound frame pushed to sender and recipient connections."""

    id: int
    sender: int
    recipient: int
    listing: int | None
    content: str
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _frame_kind(value: Any) -> str | None:
    if isinstance(value, dict):
        return "auth" if value.get("type") == "auth" else "send"
    if isinstance(value, BaseModel):
        return "auth" if isinstance(value, AuthFrame) else "send"
    return None


InboundFrame = Annotated[
    Union[Annotated[AuthFrame, Tag("auth")], Annotated[SendFrame, Tag("send")]],
    Discriminator(_frame_kind),
]

_FRAME_ADAPTER: TypeAdapter[AuthFrame | SendFrame] = TypeAdapter(InboundFrame)


def parse_frame(raw: str | bytes) -> AuthFrame | SendFrame | None:
    """Decode a raw frame, returning None for anything malformed."""
    try:
        return _FRAME_ADAPTER.validate_json(raw)
    except ValueError:
        return None
