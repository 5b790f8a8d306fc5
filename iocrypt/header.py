from __future__ import annotations

import struct
import zlib
from typing import BinaryIO, Iterator, NamedTuple, Tuple

from .constants import CRC_LEN, NONCE_SIZE, SIZE_LEN
from .errors import IntegrityError, TruncatedInputError
from .ioutil import ReadStatus, read_full


# Chunk header: nonce[N] | payload_len u64 | crc32 u32, all little endian.
# The CRC covers nonce + payload_len only; payload integrity is left to the AEAD tag.
_SIZE_STRUCT = struct.Struct("<Q")
_CRC_STRUCT = struct.Struct("<I")

# Slice size used when skipping payloads on non-seekable streams
_SKIP_SLICE = 1 << 20


class HeaderInfo(NamedTuple):
    offset: int
    nonce: bytes
    payload_len: int


def header_size(nonce_size: int = NONCE_SIZE) -> int:
    return nonce_size + SIZE_LEN + CRC_LEN


def pack_header(nonce: bytes, payload_len: int) -> bytes:
    pre_crc = bytes(nonce) + _SIZE_STRUCT.pack(payload_len)
    return pre_crc + _CRC_STRUCT.pack(zlib.crc32(pre_crc))


def unpack_header(header: bytes, nonce_size: int = NONCE_SIZE) -> Tuple[bytes, int]:
    """Split a header into ``(nonce, payload_len)`` after checking its CRC32.

    Raises:
        TruncatedInputError: ``header`` is not exactly one header long.
        IntegrityError: checksum mismatch (corrupt header or not an encrypted stream).
    """
    if len(header) != header_size(nonce_size):
        raise TruncatedInputError(f"header must be {header_size(nonce_size)} bytes, got {len(header)}")
    crc_off = nonce_size + SIZE_LEN
    nonce = bytes(header[:nonce_size])
    (payload_len,) = _SIZE_STRUCT.unpack(header[nonce_size:crc_off])
    (stored_crc,) = _CRC_STRUCT.unpack(header[crc_off:])
    calc_crc = zlib.crc32(header[:crc_off])
    if calc_crc != stored_crc:
        raise IntegrityError(
            f"corrupt header or not an encrypted stream (got CRC {stored_crc:08x}, expected {calc_crc:08x})"
        )
    return nonce, payload_len


def _skip(f: BinaryIO, n: int) -> int:
    seekable = getattr(f, "seekable", None)
    if seekable is not None and seekable():
        pos = f.tell()
        end = f.seek(0, 2)
        target = min(pos + n, end)
        f.seek(target)
        return target - pos
    scratch = bytearray(min(_SKIP_SLICE, n))
    skipped = 0
    while skipped < n:
        status, got = read_full(f, memoryview(scratch)[: min(len(scratch), n - skipped)])
        skipped += got
        if status is not ReadStatus.FULL:
            break
    return skipped


def iter_headers(f: BinaryIO, nonce_size: int = NONCE_SIZE) -> Iterator[HeaderInfo]:
    """Walk a container stream without a key, yielding each chunk header.

    Payloads are skipped (by seeking when possible). A clean end of input at
    a header boundary ends the walk; anything partial is an error.
    """
    raw = bytearray(header_size(nonce_size))
    offset = 0
    while True:
        status, got = read_full(f, raw)
        if status is ReadStatus.EOF:
            return
        if status is ReadStatus.PARTIAL:
            raise TruncatedInputError(f"partial header at offset {offset}: {got} of {len(raw)} bytes")
        nonce, payload_len = unpack_header(raw, nonce_size)
        yield HeaderInfo(offset, nonce, payload_len)
        if _skip(f, payload_len) != payload_len:
            raise TruncatedInputError(f"truncated payload for chunk at offset {offset}")
        offset += len(raw) + payload_len
