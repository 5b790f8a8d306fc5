class IocryptError(Exception):
    """Base class for iocrypt-specific errors.

    ``bytes_written`` is filled in by the stream functions with the number of
    output bytes written before the failure. It is informational only; the
    output should be discarded.
    """

    bytes_written = 0


# Construction
class InvalidKeySizeError(IocryptError, ValueError):
    pass


class RandomSourceError(IocryptError):
    pass


# Container decoding
class IntegrityError(IocryptError):
    """Header checksum mismatch: corrupt data or not an encrypted stream."""


class TruncatedInputError(IocryptError, EOFError):
    pass


class AuthenticationError(IocryptError):
    """AEAD tag verification failed: tampered data or wrong key."""


class BudgetMismatchError(IocryptError):
    def __init__(self, consumed: int, expected: int):
        super().__init__(f"decoded {consumed} bytes, expected {expected}")
        self.consumed = consumed
        self.expected = expected


# Output
class ShortWriteError(IocryptError, OSError):
    pass
