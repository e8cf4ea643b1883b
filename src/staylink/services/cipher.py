"""Authenticated encryption of message content at rest."""

from __future__ import annotations

import os
import threading
from typing import Final

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from staylink.core.errors import DecryptionError
from staylink.core.settings import settings

KEY_LENGTH_BYTES: Final[int] = 32
NONCE_LENGTH_BYTES: Final[int] = 12
TAG_LENGTH_BYTES: Final[int] = 16
TOKEN_SEPARATOR: Final[str] = ":"


def derive_key(passphrase: str, *, salt: str, n: int, r: int, p: int) -> bytes:
    """Stretch a passphrase into an AES-256 key with scrypt."""
    kdf = Scrypt(salt=salt.encode("utf-8"), length=KEY_LENGTH_BYTES, n=n, r=r, p=p)
    return kdf.derive(passphrase.encode("utf-8"))


class ContentCipher:
    """AES-256-GCM cipher producing ``nonce:tag:ciphertext`` hex tokens.

    A fresh random nonce is drawn for every call to :meth:`encrypt`; callers
    cannot supply one.
    """

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_LENGTH_BYTES:
            raise ValueError(f"Content key must be {KEY_LENGTH_BYTES} bytes")
        self._aead = AESGCM(key)

    @classmethod
    def from_passphrase(
        cls,
        passphrase: str,
        *,
        salt: str = "salt",
        n: int = 2**14,
        r: int = 8,
        p: int = 1,
    ) -> ContentCipher:
        """Build a cipher keyed by a passphrase-derived secret."""
        return cls(derive_key(passphrase, salt=salt, n=n, r=r, p=p))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(algorithm='aes-256-gcm')"

    def encrypt(self, plaintext: str) -> str:
        """Encrypt text and return the opaque token."""
        nonce = os.urandom(NONCE_LENGTH_BYTES)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_LENGTH_BYTES], sealed[-TAG_LENGTH_BYTES:]
        return TOKEN_SEPARATOR.join((nonce.hex(), tag.hex(), ciphertext.hex()))

    def decrypt(self, token: str) -> str:
        """Recover the plaintext of a token.

        Raises:
            DecryptionError: If the token is malformed, tampered with or was
                sealed under a different key.
        """
        parts = token.split(TOKEN_SEPARATOR)
        if len(parts) != 3:
            raise DecryptionError("Malformed content token")
        nonce_hex, tag_hex, ciphertext_hex = parts
        try:
            nonce = bytes.fromhex(nonce_hex)
            tag = bytes.fromhex(tag_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError as err:
            raise DecryptionError("Content token is not valid hex") from err
        if len(nonce) != NONCE_LENGTH_BYTES or len(tag) != TAG_LENGTH_BYTES:
            raise DecryptionError("Content token has invalid nonce or tag length")
        try:
            plaintext = self._aead.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as err:
            raise DecryptionError("Content token failed authentication") from err
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecryptionError("Decrypted content is not UTF-8") from err


_CIPHER: ContentCipher | None = None
_CIPHER_LOCK = threading.Lock()


def get_content_cipher() -> ContentCipher:
    """Return the process-wide cipher, deriving its key on first use."""
    global _CIPHER
    if _CIPHER is None:
        with _CIPHER_LOCK:
            if _CIPHER is None:
                _CIPHER = ContentCipher.from_passphrase(
                    settings.message_secret,
                    salt=settings.message_kdf_salt,
                    n=settings.message_kdf_n,
                    r=settings.message_kdf_r,
                    p=settings.message_kdf_p,
                )
    return _CIPHER
