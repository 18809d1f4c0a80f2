"""Logging setup for the sealkit command line.

Library modules only create loggers; handlers are installed here, once, by
the CLI entry point.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .constants import ENV_LOG_LEVEL
from .output import CommandOutput

_LEVEL_MAP = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def configure_logging(output: Optional[CommandOutput] = None, *, force: bool = False) -> int:
    """Configure the root logger and return the level in effect.

    Order of precedence for level:
    1. ``SEALKIT_LOG_LEVEL`` if set to a known level name
    2. The level implied by ``output`` (quiet/normal/verbose)
    """
    output = output or CommandOutput.default()
    level = output.log_level
    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        level = _LEVEL_MAP.get(env_level.upper(), level)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        force=force,
    )
    return level
