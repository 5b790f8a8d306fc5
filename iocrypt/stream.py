"""Chunked AES-GCM stream encryption.

Container layout is a plain concatenation of framed chunks::

    nonce[12] | payload_len u64 | crc32 u32 | ciphertext[payload_len]

The first nonce of a stream is random; every following chunk uses the
previous nonce plus one. There is no magic number or trailer, so the end of
the stream is the end of the input.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from .aead import AeadContext
from .constants import DEFAULT_CHUNK_SIZE
from .errors import BudgetMismatchError, IocryptError, TruncatedInputError
from .header import header_size, pack_header, unpack_header
from .ioutil import ReadStatus, read_full, write_all
from .nonce import nonce_sequence, random_nonce


log = logging.getLogger(__name__)

# Payloads are read in growing slices starting here, so a bogus length in an
# otherwise valid header fails on EOF instead of allocating it all up front.
_READ_SLICE = 1 << 20


def _read_payload(f: BinaryIO, n: int, offset: int) -> bytearray:
    buf = bytearray()
    while len(buf) < n:
        piece = bytearray(min(n - len(buf), max(len(buf), _READ_SLICE)))
        status, got = read_full(f, piece)
        buf += memoryview(piece)[:got]
        if status is not ReadStatus.FULL:
            raise TruncatedInputError(f"truncated payload for chunk at offset {offset}: {len(buf)} of {n} bytes")
    return buf


def encrypt(reader: BinaryIO, writer: BinaryIO, key: bytes, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Encrypt ``reader`` into ``writer`` as a chunked container.

    Args:
        reader: Binary stream to encrypt; consumed to end of input.
        writer: Binary stream receiving headers and sealed chunks.
        key: 16- or 32-byte AES key.
        chunk_size: Plaintext bytes per chunk (default 64 MiB).

    Returns:
        Total number of bytes written to ``writer``. Empty input writes nothing.

    Raises:
        InvalidKeySizeError: unsupported key length (before any output).
        RandomSourceError: no secure randomness for the initial nonce.
    """
    aead = AeadContext(key)
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")
    nonces = nonce_sequence(random_nonce(aead.nonce_size))

    buf = bytearray(chunk_size)
    written = 0
    chunks = 0
    try:
        for nonce in nonces:
            status, n = read_full(reader, buf)
            if status is ReadStatus.EOF:
                break
            # A short read is the final partial chunk
            sealed = aead.seal(nonce, memoryview(buf)[:n])
            written += write_all(writer, pack_header(nonce, len(sealed)))
            written += write_all(writer, sealed)
            log.debug("sealed chunk %d: nonce=%s plaintext=%d payload=%d", chunks, nonce.hex(), n, len(sealed))
            chunks += 1
    except IocryptError as exc:
        exc.bytes_written = written
        raise
    log.debug("encrypt: %d chunk(s), %d bytes written", chunks, written)
    return written


def decrypt(reader: BinaryIO, writer: BinaryIO, key: bytes) -> int:
    """Decrypt a whole container stream. Same as ``decrypt_n(..., max_len=0)``."""
    return decrypt_n(reader, writer, key, 0)


def decrypt_n(reader: BinaryIO, writer: BinaryIO, key: bytes, max_len: int = 0) -> int:
    """Decrypt a container stream, optionally bounded to ``max_len`` input bytes.

    ``max_len`` counts headers and payloads. When it is zero the stream is
    consumed to end of input. When positive, decoding stops before a header
    or payload that would cross the budget, and the bytes consumed must then
    equal ``max_len`` exactly; trailing input beyond the budget is left unread.

    Returns:
        Total plaintext bytes written to ``writer``.

    Raises:
        InvalidKeySizeError: unsupported key length.
        IntegrityError: header checksum mismatch.
        TruncatedInputError: partial header or payload.
        AuthenticationError: tag verification failed (tampering or wrong key).
        BudgetMismatchError: bounded decode did not land exactly on ``max_len``.
    """
    aead = AeadContext(key)
    if not isinstance(max_len, int) or max_len < 0:
        raise ValueError("max_len must be a non-negative integer")
    nonce_size = aead.nonce_size
    header = bytearray(header_size(nonce_size))

    consumed = 0
    written = 0
    chunks = 0
    try:
        while True:
            if max_len > 0 and consumed + len(header) > max_len:
                break

            # Headers are atomic: end of input is only clean on a header boundary.
            status, n = read_full(reader, header)
            if status is ReadStatus.EOF:
                break
            if status is ReadStatus.PARTIAL:
                raise TruncatedInputError(f"partial header at offset {consumed}: {n} of {len(header)} bytes")
            offset = consumed
            consumed += n

            nonce, payload_len = unpack_header(header, nonce_size)
            if max_len > 0 and consumed + payload_len > max_len:
                break

            payload = _read_payload(reader, payload_len, offset)
            plaintext = aead.open(nonce, payload)
            consumed += payload_len

            written += write_all(writer, plaintext)
            log.debug("opened chunk %d: offset=%d nonce=%s payload=%d plaintext=%d", chunks, offset, nonce.hex(), payload_len, len(plaintext))
            chunks += 1

        if max_len > 0 and consumed != max_len:
            raise BudgetMismatchError(consumed, max_len)
    except IocryptError as exc:
        exc.bytes_written = written
        raise
    log.debug("decrypt: %d chunk(s), %d input bytes, %d bytes written", chunks, consumed, written)
    return written
