"""Authenticated encryption of small secret payloads.

Two AEAD constructions are supported, both from PyCryptodomex and both
taking a 32-byte key and a 12-byte nonce: AES-256-GCM (default) and
ChaCha20-Poly1305. Associated data is always empty.

The sealed format is ``ciphertext || tag`` with a 16-byte tag. The nonce is
not part of it: callers keep the nonce alongside the blob and must never
reuse a nonce with the same key for two different plaintexts. Callers who
do not want that burden can use :func:`seal_with_random_nonce`, which
prepends a fresh random nonce to the blob.

Decryption never raises. Tag mismatch, a short blob, a bad key or nonce all
yield ``None`` so that callers cannot be turned into an oracle for which
check failed.
"""

from __future__ import annotations

from typing import Optional

from Cryptodome.Cipher import AES, ChaCha20_Poly1305
from Cryptodome.Random import get_random_bytes

from .constants import (
    CIPHER_AES_256_GCM,
    CIPHER_CHACHA20_POLY1305,
    DEFAULT_CIPHER,
    KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
)
from .errors import InvalidKeyError, InvalidNonceError


_BYTES_LIKE = (bytes, bytearray, memoryview)


def _new_cipher(cipher: str, key: bytes, nonce: bytes):
    # bytes(int) would silently yield a zero-filled buffer
    if not isinstance(key, _BYTES_LIKE):
        raise InvalidKeyError(f"Key must be bytes, not {type(key).__name__}")
    if not isinstance(nonce, _BYTES_LIKE):
        raise InvalidNonceError(f"Nonce must be bytes, not {type(nonce).__name__}")
    key = bytes(key)
    nonce = bytes(nonce)
    if len(key) != KEY_SIZE:
        raise InvalidKeyError(f"Key must be {KEY_SIZE} bytes for {cipher}")
    if len(nonce) != NONCE_SIZE:
        raise InvalidNonceError(f"Nonce must be {NONCE_SIZE} bytes for {cipher}")
    if cipher == CIPHER_AES_256_GCM:
        return AES.new(key, AES.MODE_GCM, nonce=nonce, mac_len=TAG_SIZE)
    if cipher == CIPHER_CHACHA20_POLY1305:
        return ChaCha20_Poly1305.new(key=key, nonce=nonce)
    raise ValueError(f"unsupported cipher: {cipher}")


def seal(plaintext: bytes, key: bytes, nonce: bytes, *, cipher: str = DEFAULT_CIPHER) -> bytes:
    """Encrypt and authenticate ``plaintext``; returns ``ciphertext || tag``.

    Raises:
        InvalidKeyError: ``key`` is not 32 bytes.
        InvalidNonceError: ``nonce`` is not 12 bytes.
        TypeError: ``plaintext`` is not bytes-like.
        ValueError: ``cipher`` is not a supported name.
    """
    if not isinstance(plaintext, _BYTES_LIKE):
        raise TypeError(f"plaintext must be bytes, not {type(plaintext).__name__}")
    c = _new_cipher(cipher, key, nonce)
    ciphertext, tag = c.encrypt_and_digest(bytes(plaintext))
    return ciphertext + tag


def unseal(blob: bytes, key: bytes, nonce: bytes, *, cipher: str = DEFAULT_CIPHER) -> Optional[bytes]:
    """Verify and decrypt a ``ciphertext || tag`` blob; None on any failure."""
    if not isinstance(blob, _BYTES_LIKE) or len(blob) < TAG_SIZE:
        return None
    try:
        c = _new_cipher(cipher, key, nonce)
        return c.decrypt_and_verify(bytes(blob[:-TAG_SIZE]), bytes(blob[-TAG_SIZE:]))
    except (ValueError, TypeError):
        # MAC check failures are ValueError as well; all are reported alike
        return None


def generate_key() -> bytes:
    return get_random_bytes(KEY_SIZE)


def generate_nonce() -> bytes:
    return get_random_bytes(NONCE_SIZE)


def seal_with_random_nonce(plaintext: bytes, key: bytes, *, cipher: str = DEFAULT_CIPHER) -> bytes:
    """Seal under a fresh random nonce; returns ``nonce || ciphertext || tag``."""
    nonce = generate_nonce()
    return nonce + seal(plaintext, key, nonce, cipher=cipher)


def unseal_embedded(blob: bytes, key: bytes, *, cipher: str = DEFAULT_CIPHER) -> Optional[bytes]:
    """Reverse :func:`seal_with_random_nonce`; None on any failure."""
    if not isinstance(blob, _BYTES_LIKE) or len(blob) < NONCE_SIZE + TAG_SIZE:
        return None
    return unseal(blob[NONCE_SIZE:], key, blob[:NONCE_SIZE], cipher=cipher)


__all__ = [
    "seal",
    "unseal",
    "seal_with_random_nonce",
    "unseal_embedded",
    "generate_key",
    "generate_nonce",
]
