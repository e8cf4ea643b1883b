"""Error kinds raised by the messaging core.

Each kind carries the HTTP status the REST boundary maps it to and a generic
public detail. Server-side kinds (5xx) never expose their internal message to
clients; the boundary logs it instead.
"""

from __future__ import annotations


class MessagingError(Exception):
    """Base class for all messaging core failures."""

    status_code: int = 500
    default_detail: str = "Server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        """Return the message that may be shown to API callers."""
        if self.status_code >= 500:
            return MessagingError.default_detail
        return self.detail


class ValidationError(MessagingError):
    """Required fields are missing or malformed."""

    status_code = 400
    default_detail = "Invalid request"


class AuthError(MessagingError):
    """Bearer token is missing, invalid or expired."""

    status_code = 401
    default_detail = "Could not validate credentials"


class ForbiddenError(MessagingError):
    """The authorization policy rejects the actor/counterpart/listing combination."""

    status_code = 403
    default_detail = "Not authorized"


class NotFoundError(MessagingError):
    """A referenced listing or user does not exist."""

    status_code = 404
    default_detail = "Not found"


class DecryptionError(MessagingError):
    """A content token is malformed or fails its integrity check."""

    default_detail = "Message content could not be decrypted"


class StoreError(MessagingError):
    """The persistence layer failed."""

    default_detail = "Message store failure"
