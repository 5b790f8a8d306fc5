from __future__ import annotations

import os
from typing import Iterator

from .constants import AES128_KEY_SIZE, AES256_KEY_SIZE, KEY_SIZES, NONCE_SIZE
from .errors import InvalidKeySizeError, RandomSourceError


def _random_bytes(n: int) -> bytes:
    try:
        b = os.urandom(n)
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceError(f"secure random source unavailable: {exc}") from exc
    if len(b) != n:
        raise RandomSourceError(f"secure random source returned {len(b)} of {n} bytes")
    return b


def random_nonce(size: int = NONCE_SIZE) -> bytes:
    return _random_bytes(size)


def advance(nonce: bytes) -> bytes:
    """Return ``nonce`` plus one, read as a little-endian integer of its full width.

    Wraps to zero on overflow. This is a counter, not a re-randomization:
    uniqueness holds for fewer than 2**(8*len(nonce)) chunks per stream.
    """
    width = len(nonce)
    n = (int.from_bytes(nonce, "little") + 1) & ((1 << (8 * width)) - 1)
    return n.to_bytes(width, "little")


def nonce_sequence(first: bytes) -> Iterator[bytes]:
    nonce = bytes(first)
    while True:
        yield nonce
        nonce = advance(nonce)


def random_key(size: int) -> bytes:
    if size not in KEY_SIZES:
        raise InvalidKeySizeError(f"unsupported key size {size}; expected one of {KEY_SIZES}")
    return _random_bytes(size)


def random_aes128_key() -> bytes:
    return random_key(AES128_KEY_SIZE)


def random_aes256_key() -> bytes:
    return random_key(AES256_KEY_SIZE)
