"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from staylink.core.errors import AuthError
from staylink.core.security import decode_access_token, subject_to_user_id
from staylink.core.settings import settings
from staylink.db.session import get_db, session_scope
from staylink.models import User
from staylink.services.cipher import ContentCipher, get_content_cipher
from staylink.services.messaging import MessagingService
from staylink.services.registry import get_connection_registry
from staylink.services.relay import RelayService

# HTTP Bearer scheme for JWT authentication; missing credentials are reported as 401 below.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If the token is missing or invalid, or the user is unknown
    """
    if credentials is None:
        raise _credentials_exception()
    try:
        user_id = subject_to_user_id(decode_access_token(credentials.credentials))
    except AuthError as err:
        raise _credentials_exception() from err

    user = db.get(User, user_id)
    if user is None:
        raise _credentials_exception("User not found")
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_cipher_dep() -> ContentCipher:
    """Return the process-wide content cipher."""
    return get_content_cipher()


CipherDep = Annotated[ContentCipher, Depends(get_cipher_dep)]


def get_messaging_service(db: SessionDep, cipher: CipherDep) -> MessagingService:
    """Build the REST messaging service for one request."""
    return MessagingService(db, cipher)


MessagingServiceDep = Annotated[MessagingService, Depends(get_messaging_service)]


def get_relay_service(cipher: CipherDep) -> RelayService:
    """Build the relay bound to the process-wide connection registry."""
    return RelayService(
        get_connection_registry(),
        cipher,
        session_scope,
        enforce_listing_policy=settings.relay_enforce_listing_policy,
    )


RelayServiceDep = Annotated[RelayService, Depends(get_relay_service)]
