# Plaintext chunk size used by the encryptor (64 MiB); the final chunk may be shorter.
DEFAULT_CHUNK_SIZE = 64 * (1 << 20)

# AES-GCM parameters
NONCE_SIZE = 12  # 96-bit GCM nonce
TAG_SIZE = 16

# Supported raw key sizes: AES-128 and AES-256
AES128_KEY_SIZE = 16
AES256_KEY_SIZE = 32
KEY_SIZES = (AES128_KEY_SIZE, AES256_KEY_SIZE)

# Chunk header (little endian):
#  - nonce[NONCE_SIZE]
#  - payload_len u64 (ciphertext bytes following the header, tag included)
#  - crc32 u32 (IEEE, over nonce + payload_len)
SIZE_LEN = 8
CRC_LEN = 4
HEADER_SIZE = NONCE_SIZE + SIZE_LEN + CRC_LEN
