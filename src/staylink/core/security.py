"""Bearer token helpers built on python-jose."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from staylink.core.errors import AuthError
from staylink.core.settings import settings


def create_access_token(user_id: int | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a signed access token whose subject is the user id."""
    to_encode: dict[str, object] = {"sub": str(user_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str | None) -> str:
    """Verify a token and return its subject.

    Raises:
        AuthError: If the token is missing, badly signed, expired or has no subject.
    """
    if not token:
        raise AuthError()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise AuthError() from err
    subject = payload.get("sub")
    if not subject:
        raise AuthError()
    return str(subject)


def subject_to_user_id(subject: str) -> int:
    """Convert a token subject into a numeric user id."""
    try:
        return int(subject)
    except ValueError as err:
        raise AuthError() from err
