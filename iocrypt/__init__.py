"""
iocrypt — encrypt and decrypt byte streams of any size with AES-GCM.

Data is split into fixed-size chunks (64 MiB by default). Each chunk is sealed
independently and framed by a small CRC32-checked header carrying its nonce
and ciphertext length, so memory use stays bounded by the chunk size:

    nonce[12] | payload_len u64 | crc32 u32 | ciphertext+tag[payload_len]

Usage::

    import io
    import iocrypt

    key = iocrypt.random_aes256_key()
    with open("big.bin", "rb") as src, open("big.bin.enc", "wb") as dst:
        iocrypt.encrypt(src, dst, key)
    with open("big.bin.enc", "rb") as src, open("big.out", "wb") as dst:
        iocrypt.decrypt(src, dst, key)

``decrypt_n`` bounds decoding to an exact number of input bytes, for
containers embedded in a larger stream.
"""

__version__ = "0.1"

from .nonce import random_aes128_key, random_aes256_key, random_key
from .stream import decrypt, decrypt_n, encrypt

__all__ = [
    "encrypt",
    "decrypt",
    "decrypt_n",
    "random_key",
    "random_aes128_key",
    "random_aes256_key",
]
