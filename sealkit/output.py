from __future__ import annotations

import enum
import logging


class CommandOutput(enum.Enum):
    """Controls how much a command prints."""

    NORMAL = "normal"
    VERBOSE = "verbose"
    QUIET = "quiet"

    @classmethod
    def default(cls) -> "CommandOutput":
        return cls.NORMAL

    @classmethod
    def from_quiet_and_verbose(cls, quiet: bool, verbose: bool) -> "CommandOutput":
        # quiet wins over verbose
        if quiet:
            return cls.QUIET
        if verbose:
            return cls.VERBOSE
        return cls.NORMAL

    @property
    def log_level(self) -> int:
        return {
            CommandOutput.QUIET: logging.WARNING,
            CommandOutput.NORMAL: logging.INFO,
            CommandOutput.VERBOSE: logging.DEBUG,
        }[self]
