"""Persistence and conversation queries for message records."""

from __future__ import annotations

import logging

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

from staylink.core.errors import StoreError, ValidationError
from staylink.models import Message

logger = logging.getLogger(__name__)


def _pair_clause(a: int, b: int) -> ColumnElement[bool]:
    """Match messages sent in either direction between two users."""
    return or_(
        and_(Message.sender_id == a, Message.recipient_id == b),
        and_(Message.sender_id == b, Message.recipient_id == a),
    )


def _party_clause(user_id: int) -> ColumnElement[bool]:
    return or_(Message.sender_id == user_id, Message.recipient_id == user_id)


class MessageStore:
    """Append-only message storage with simple predicate queries.

    All queries return rows in ascending ``created_at`` order; rows sharing a
    timestamp fall back to insertion id.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def append(
        self,
        *,
        sender_id: int,
        recipient_id: int,
        content: str,
        listing_id: int | None = None,
    ) -> Message:
        """Persist a new message whose content is already encrypted."""
        if not content:
            raise ValidationError("Message content is required")
        message = Message(
            sender_id=sender_id,
            recipient_id=recipient_id,
            listing_id=listing_id,
            content=content,
        )
        try:
            self.db.add(message)
            self.db.commit()
            self.db.refresh(message)
        except SQLAlchemyError as err:
            self.db.rollback()
            raise StoreError(f"Failed to append message: {err}") from err
        return message

    def query_conversation(
        self,
        participant_a: int,
        participant_b: int,
        listing_id: int | None = None,
    ) -> list[Message]:
        """Return the messages exchanged between two users."""
        criteria = [_pair_clause(participant_a, participant_b)]
        if listing_id is not None:
            criteria.append(Message.listing_id == listing_id)
        return self._select(*criteria)

    def query_inbox(self, user_id: int, listing_id: int) -> list[Message]:
        """Return every message on a listing the user sent or received."""
        return self._select(Message.listing_id == listing_id, _party_clause(user_id))

    def query_owner_inbox(
        self,
        owner_id: int,
        listing_id: int,
        counterpart_id: int | None = None,
    ) -> list[Message]:
        """Return the owner's inbox for a listing, optionally for one guest."""
        if counterpart_id is None:
            return self.query_inbox(owner_id, listing_id)
        return self.query_conversation(owner_id, counterpart_id, listing_id)

    def _select(self, *criteria: ColumnElement[bool]) -> list[Message]:
        stmt = (
            select(Message)
            .where(*criteria)
            .options(selectinload(Message.sender), selectinload(Message.recipient))
            .order_by(Message.created_at, Message.id)
        )
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as err:
            logger.error("Message query failed: %s", err)
            raise StoreError(f"Failed to query messages: {err}") from err
