# src/staylink/models/listing.py
"""SQLAlchemy model for the listing ownership relation."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staylink.db.session import Base
from staylink.models.user import User


class Listing(Base):
    """A rentable listing with exactly one owner."""

    __tablename__ = "listing"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_account.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")

    owner: Mapped[User] = relationship(User)
