from __future__ import annotations

"""AES-GCM adapter backed by PyCryptodomex.

Each chunk is sealed as ``ciphertext || tag`` under a caller-supplied 12-byte
nonce with no associated data. A fresh GCM object is created per call since
PyCryptodome cipher objects are single-use.
"""

from Cryptodome.Cipher import AES

from .constants import KEY_SIZES, NONCE_SIZE, TAG_SIZE
from .errors import AuthenticationError, InvalidKeySizeError


class AeadContext:
    """AES-128/256-GCM seal/open keyed once per stream."""

    def __init__(self, key: bytes):
        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise TypeError("key must be bytes")
        if len(key) not in KEY_SIZES:
            raise InvalidKeySizeError(f"invalid key size {len(key)}; expected one of {KEY_SIZES}")
        self._key = bytes(key)

    @property
    def nonce_size(self) -> int:
        return NONCE_SIZE

    def _cipher(self, nonce: bytes):
        if len(nonce) != NONCE_SIZE:
            raise ValueError(f"nonce must be {NONCE_SIZE} bytes for AES-GCM")
        return AES.new(self._key, AES.MODE_GCM, nonce=bytes(nonce), mac_len=TAG_SIZE)

    def seal(self, nonce: bytes, plaintext: bytes) -> bytes:
        """Encrypt and authenticate ``plaintext``. Returns ciphertext || tag."""
        ciphertext, tag = self._cipher(nonce).encrypt_and_digest(plaintext)
        return ciphertext + tag

    def open(self, nonce: bytes, sealed: bytes) -> bytes:
        """Verify and decrypt ``ciphertext || tag``."""
        cipher = self._cipher(nonce)
        if len(sealed) < TAG_SIZE:
            raise AuthenticationError(f"sealed chunk shorter than the {TAG_SIZE}-byte tag")
        body = memoryview(sealed)
        try:
            return cipher.decrypt_and_verify(body[:-TAG_SIZE], bytes(body[-TAG_SIZE:]))
        except ValueError as exc:
            raise AuthenticationError("message authentication failed") from exc
