# zstd frame magic (little-endian 0xFD2FB528)
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"

# AEAD parameters
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_SIZE = 32

CIPHER_AES_256_GCM = "aes-256-gcm"
CIPHER_CHACHA20_POLY1305 = "chacha20-poly1305"
CIPHERS = (CIPHER_AES_256_GCM, CIPHER_CHACHA20_POLY1305)
DEFAULT_CIPHER = CIPHER_AES_256_GCM

# Only permission bits are restored on extraction; setuid/setgid/sticky are dropped.
MODE_MASK = 0o777

COPY_BUFSIZE = 1_048_576  # 1 MiB

# Environment
ENV_KEY = "SEALKIT_KEY"
ENV_LOG_LEVEL = "SEALKIT_LOG_LEVEL"
