"""Service layer for the StayLink messaging relay."""

from .cipher import ContentCipher, get_content_cipher
from .message_store import MessageStore
from .messaging import MessagingService
from .registry import ConnectionRegistry, get_connection_registry
from .relay import ConnectionState, RelayService, RelaySession

__all__ = [
    "ContentCipher",
    "get_content_cipher",
    "MessageStore",
    "MessagingService",
    "ConnectionRegistry",
    "get_connection_registry",
    "ConnectionState",
    "RelayService",
    "RelaySession",
]
