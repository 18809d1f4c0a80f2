class SealkitError(Exception):
    """Base class for sealkit-specific errors."""


# Archive extraction
class DecodeError(SealkitError):
    """Input is not a valid zstd stream."""


class ArchiveFormatError(SealkitError):
    """The decompressed tar container is structurally invalid."""


class ExtractError(SealkitError):
    """Writing an accepted entry to the destination failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"failed to extract {path}: {reason}")
        self.path = path


# AEAD
class InvalidKeyError(SealkitError, ValueError):
    pass


class InvalidNonceError(SealkitError, ValueError):
    pass


class QuietExit(Exception):
    """Exit with the given status code.

    Raised after the command has already reported the failure; the top-level
    handler exits without printing anything further.
    """

    def __init__(self, code: int):
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"exit with {self.code}"
