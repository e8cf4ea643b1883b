# src/staylink/models/message.py
"""Models describing messages exchanged between users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staylink.db.session import Base
from staylink.db.time import utcnow
from staylink.models.user import User


class Message(Base):
    """Message between two users, optionally scoped to a listing.

    ``content`` is always the cipher token produced at write time; rows are
    never updated after insertion.
    """

    __tablename__ = "message"
    __table_args__ = (
        Index("ix_message_pair", "sender_id", "recipient_id"),
        Index("ix_message_listing_created", "listing_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_account.id"), nullable=False)
    recipient_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_account.id"), nullable=False)
    listing_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("listing.id"), nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    sender: Mapped[User] = relationship(User, foreign_keys=[sender_id])
    recipient: Mapped[User] = relationship(User, foreign_keys=[recipient_id])
