"""
sealkit: safe tarball extraction and small-secret sealing.

Features:

- Unpack zstd-compressed tarballs held in memory, with optional stripping of
  leading path components. Entries that would escape the destination
  (``..`` segments, absolute paths, symlinks pointing outside) are skipped.
- Seal/unseal small secrets (registry credentials and the like) with
  AES-256-GCM or ChaCha20-Poly1305 via PyCryptodomex. Failed decryption
  returns None without saying why.
- Small helpers used around those: ``${VAR}`` template expansion, requirement
  string formatting, and the quiet/normal/verbose output switch.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "errors",
    "codec",
    "pathutil",
    "unpack",
    "aead",
    "envvars",
    "requirements",
    "output",
]

# Programmatic API: sealkit.unpack.unpack_tarball, sealkit.aead.seal/unseal,
# and the CLI functions in sealkit.cli (cmd_unpack/cmd_seal/cmd_unseal).
