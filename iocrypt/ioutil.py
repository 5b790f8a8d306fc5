from __future__ import annotations

import enum
from typing import BinaryIO, Tuple, Union

from .errors import ShortWriteError


Buffer = Union[bytearray, memoryview]


class ReadStatus(enum.Enum):
    FULL = "full"
    PARTIAL = "partial"  # some bytes, then end of input
    EOF = "eof"  # end of input before any byte


def read_full(f: BinaryIO, buf: Buffer) -> Tuple[ReadStatus, int]:
    """Fill ``buf`` from ``f``, retrying short reads until full or end of input.

    Returns the status and the number of bytes placed in ``buf``.
    """
    with memoryview(buf) as view:
        want = len(view)
        got = 0
        readinto = getattr(f, "readinto", None)
        while got < want:
            if readinto is not None:
                n = readinto(view[got:])
            else:
                data = f.read(want - got)
                n = len(data) if data else 0
                if n:
                    view[got : got + n] = data
            if not n:
                break
            got += n
    if got == want:
        return ReadStatus.FULL, got
    if got == 0:
        return ReadStatus.EOF, 0
    return ReadStatus.PARTIAL, got


def write_all(f: BinaryIO, data: Buffer) -> int:
    """Write all of ``data``, looping over short writes. Returns ``len(data)``."""
    total = len(data)
    done = 0
    pending = data
    while done < total:
        n = f.write(pending)
        if n is None:  # writer does not report counts
            break
        if n == 0:
            raise ShortWriteError(f"short write: {done} of {total} bytes accepted")
        done += n
        pending = memoryview(data)[done:]
    return total
