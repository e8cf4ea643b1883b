# tests/services/test_cipher.py
"""Tests for the content cipher."""

import pytest

from staylink.core.errors import DecryptionError
from staylink.services.cipher import (
    NONCE_LENGTH_BYTES,
    TAG_LENGTH_BYTES,
    ContentCipher,
    derive_key,
    get_content_cipher,
)


@pytest.fixture(scope="module")
def local_cipher() -> ContentCipher:
    return ContentCipher.from_passphrase("correct horse battery staple", n=1024)


def _flip_hex_char(component: str, index: int = 0) -> str:
    replacement = "0" if component[index] != "0" else "1"
    return component[:index] + replacement + component[index + 1 :]


@pytest.mark.parametrize(
    "plaintext",
    [
        "Is this available?",
        "Ünïcødé ✓ 家 🏡",
        "x" * 10_000,
        "line one\nline two:with:colons",
    ],
)
def test_round_trip(local_cipher: ContentCipher, plaintext: str) -> None:
    assert local_cipher.decrypt(local_cipher.encrypt(plaintext)) == plaintext


def test_token_layout(local_cipher: ContentCipher) -> None:
    token = local_cipher.encrypt("hello")
    nonce_hex, tag_hex, ciphertext_hex = token.split(":")

    assert len(bytes.fromhex(nonce_hex)) == NONCE_LENGTH_BYTES
    assert len(bytes.fromhex(tag_hex)) == TAG_LENGTH_BYTES
    assert len(bytes.fromhex(ciphertext_hex)) == len("hello")
    assert "hello" not in token


def test_same_plaintext_never_yields_same_token(local_cipher: ContentCipher) -> None:
    tokens = {local_cipher.encrypt("same text") for _ in range(50)}
    assert len(tokens) == 50
    nonces = {token.split(":")[0] for token in tokens}
    assert len(nonces) == 50


@pytest.mark.parametrize("component", [1, 2])
def test_tampered_component_is_rejected(local_cipher: ContentCipher, component: int) -> None:
    parts = local_cipher.encrypt("Is this available?").split(":")
    parts[component] = _flip_hex_char(parts[component])

    with pytest.raises(DecryptionError):
        local_cipher.decrypt(":".join(parts))


def test_scrambled_tag_is_rejected(local_cipher: ContentCipher) -> None:
    nonce_hex, tag_hex, ciphertext_hex = local_cipher.encrypt("hi").split(":")
    scrambled = tag_hex[::-1] if tag_hex[::-1] != tag_hex else _flip_hex_char(tag_hex)

    with pytest.raises(DecryptionError):
        local_cipher.decrypt(f"{nonce_hex}:{scrambled}:{ciphertext_hex}")


@pytest.mark.parametrize(
    "token",
    [
        "",
        "deadbeef",
        "aa:bb",
        "aa:bb:cc:dd",
        "zz:zz:zz",
        "00" * NONCE_LENGTH_BYTES + ":" + "00" * 4 + ":00",
    ],
)
def test_malformed_tokens_are_rejected(local_cipher: ContentCipher, token: str) -> None:
    with pytest.raises(DecryptionError):
        local_cipher.decrypt(token)


def test_wrong_key_is_rejected(local_cipher: ContentCipher) -> None:
    other = ContentCipher.from_passphrase("a different passphrase", n=1024)
    with pytest.raises(DecryptionError):
        other.decrypt(local_cipher.encrypt("private"))


def test_key_derivation_is_deterministic() -> None:
    first = derive_key("passphrase", salt="salt", n=1024, r=8, p=1)
    second = derive_key("passphrase", salt="salt", n=1024, r=8, p=1)
    salted = derive_key("passphrase", salt="pepper", n=1024, r=8, p=1)

    assert first == second
    assert len(first) == 32
    assert salted != first


def test_rejects_short_keys() -> None:
    with pytest.raises(ValueError):
        ContentCipher(b"too short")


def test_repr_does_not_expose_key() -> None:
    key = derive_key("passphrase", salt="salt", n=1024, r=8, p=1)
    cipher = ContentCipher(key)
    assert key.hex() not in repr(cipher)


def test_process_cipher_is_shared() -> None:
    assert get_content_cipher() is get_content_cipher()
