"""Real-time relay turning inbound frames into stored and delivered messages.

Each live connection gets a :class:`RelaySession` that moves through
``unauthenticated -> authenticated -> closed``. Auth frames bind the
connection to a user in the :class:`ConnectionRegistry`; send frames are
authenticated on their own, encrypted, stored and pushed in plaintext to the
sender's and recipient's registered connections.

The transport has no error channel: malformed frames, bad tokens and failed
sends are logged and dropped while the connection stays open.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from contextlib import AbstractContextManager

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from staylink.core.errors import AuthError, MessagingError
from staylink.core.security import decode_access_token, subject_to_user_id
from staylink.models import User
from staylink.schemas.frames import AuthFrame, DeliveryFrame, SendFrame, parse_frame
from staylink.services.authorization import ensure_can_participate, get_listing
from staylink.services.cipher import ContentCipher
from staylink.services.message_store import MessageStore
from staylink.services.registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractContextManager[Session]]


class ConnectionState(str, enum.Enum):
    """Lifecycle of one relay connection."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class RelayService:
    """Shared relay logic used by every connection's session."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        cipher: ContentCipher,
        session_scope: SessionScope,
        *,
        enforce_listing_policy: bool = False,
    ) -> None:
        self.registry = registry
        self.cipher = cipher
        self.session_scope = session_scope
        self.enforce_listing_policy = enforce_listing_policy

    def open(self, connection: Connection) -> RelaySession:
        """Start tracking a freshly accepted connection."""
        return RelaySession(self, connection)

    def persist(self, frame: SendFrame) -> DeliveryFrame | None:
        """Authenticate, encrypt and store one send frame.

        Returns the frame to deliver, or None when the sender or recipient does
        not exist. Blocking; the relay calls it from a worker thread.
        """
        sender_id = subject_to_user_id(decode_access_token(frame.token))
        with self.session_scope() as db:
            sender = db.get(User, sender_id)
            if sender is None:
                logger.debug("Dropping send frame from unknown user %s", sender_id)
                return None
            if db.get(User, frame.recipient) is None:
                logger.debug("Dropping send frame to unknown recipient %s", frame.recipient)
                return None
            if self.enforce_listing_policy and frame.listing is not None:
                listing = get_listing(db, frame.listing)
                ensure_can_participate(sender.id, listing, frame.recipient)

            message = MessageStore(db).append(
                sender_id=sender.id,
                recipient_id=frame.recipient,
                listing_id=frame.listing,
                content=self.cipher.encrypt(frame.content),
            )
            return DeliveryFrame(
                id=message.id,
                sender=sender.id,
                recipient=frame.recipient,
                listing=frame.listing,
                content=frame.content,
                created_at=message.created_at,
            )

    async def relay(self, frame: SendFrame) -> DeliveryFrame | None:
        """Store a send frame and push it to both parties; never raises."""
        try:
            delivery = await run_in_threadpool(self.persist, frame)
        except MessagingError as err:
            logger.info("Dropped send frame: %s", err.detail)
            return None
        except Exception:
            logger.exception("Unexpected failure while relaying a message")
            return None
        if delivery is None:
            return None
        await self.deliver(delivery)
        return delivery

    async def deliver(self, delivery: DeliveryFrame) -> int:
        """Push a stored message to the open connections of its participants.

        Returns the number of connections reached. A failed push is logged and
        does not affect the other participant; the message stays stored either way.
        """
        payload = delivery.to_wire()
        delivered = 0
        for user_id in dict.fromkeys((delivery.sender, delivery.recipient)):
            connection = self.registry.lookup(user_id)
            if connection is None or not connection.is_open:
                continue
            try:
                await connection.send_json(payload)
            except Exception as err:
                logger.warning("Delivery of message %s to user %s failed: %s", delivery.id, user_id, err)
                continue
            delivered += 1
        return delivered


class RelaySession:
    """Per-connection state machine driven by inbound frames."""

    def __init__(self, relay: RelayService, connection: Connection) -> None:
        self.relay = relay
        self.connection = connection
        self.state = ConnectionState.UNAUTHENTICATED
        self.user_id: str | None = None

    async def receive(self, raw: str | bytes) -> None:
        """Handle one inbound frame."""
        if self.state is ConnectionState.CLOSED:
            return
        frame = parse_frame(raw)
        if frame is None:
            logger.debug("Dropped malformed frame")
            return
        if isinstance(frame, AuthFrame):
            self._authenticate(frame)
        else:
            await self.relay.relay(frame)

    def _authenticate(self, frame: AuthFrame) -> None:
        try:
            subject = decode_access_token(frame.token)
        except AuthError:
            logger.debug("Rejected auth frame with invalid token")
            return
        self.relay.registry.register(subject, self.connection)
        self.user_id = subject
        self.state = ConnectionState.AUTHENTICATED
        logger.debug("Connection authenticated for user %s", subject)

    def close(self) -> None:
        """Forget the connection once the transport has gone away."""
        self.relay.registry.unregister_by_handle(self.connection)
        self.state = ConnectionState.CLOSED
