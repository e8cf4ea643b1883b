"""Request/response messaging operations backing the REST API."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from staylink.core.errors import NotFoundError
from staylink.models import Message, User
from staylink.schemas.message import MessageRead, UserSummary
from staylink.services.authorization import (
    ensure_can_participate,
    ensure_listing_owner,
    get_listing,
)
from staylink.services.cipher import ContentCipher
from staylink.services.message_store import MessageStore

logger = logging.getLogger(__name__)


def serialize_message(message: Message, content: str) -> MessageRead:
    """Build the API form of a stored message with its plaintext content."""
    return MessageRead(
        id=message.id,
        sender=UserSummary.model_validate(message.sender),
        recipient=UserSummary.model_validate(message.recipient),
        listing=message.listing_id,
        content=content,
        created_at=message.created_at,
    )


class MessagingService:
    """Send and retrieve listing conversations for an authenticated actor."""

    def __init__(self, db: Session, cipher: ContentCipher) -> None:
        self.db = db
        self.cipher = cipher
        self.store = MessageStore(db)

    def send_message(
        self,
        actor: User,
        recipient_id: int,
        content: str,
        listing_id: int,
    ) -> MessageRead:
        """Encrypt and store a message from ``actor`` on a listing."""
        listing = get_listing(self.db, listing_id)
        if self.db.get(User, recipient_id) is None:
            raise NotFoundError("Recipient not found")
        ensure_can_participate(actor.id, listing, recipient_id)

        message = self.store.append(
            sender_id=actor.id,
            recipient_id=recipient_id,
            listing_id=listing.id,
            content=self.cipher.encrypt(content),
        )
        logger.info("Stored message %s on listing %s", message.id, listing.id)
        return serialize_message(message, content)

    def get_conversation(
        self,
        actor: User,
        counterpart_id: int,
        listing_id: int | None = None,
    ) -> list[MessageRead]:
        """Return the decrypted conversation between the actor and another user."""
        return self._decrypt_all(
            self.store.query_conversation(actor.id, counterpart_id, listing_id)
        )

    def get_listing_messages(self, actor: User, listing_id: int) -> list[MessageRead]:
        """Return the listing messages the actor sent or received."""
        listing = get_listing(self.db, listing_id)
        return self._decrypt_all(self.store.query_inbox(actor.id, listing.id))

    def get_owner_conversations(
        self,
        actor: User,
        listing_id: int,
        counterpart_id: int | None = None,
    ) -> list[MessageRead]:
        """Return the owner's inbox for a listing, optionally for one guest."""
        listing = get_listing(self.db, listing_id)
        ensure_listing_owner(actor.id, listing)
        return self._decrypt_all(
            self.store.query_owner_inbox(actor.id, listing.id, counterpart_id)
        )

    def _decrypt_all(self, messages: Iterable[Message]) -> list[MessageRead]:
        # One unreadable record fails the whole request.
        return [serialize_message(m, self.cipher.decrypt(m.content)) for m in messages]
