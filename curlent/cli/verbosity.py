"""Verbosity management for the curlent CLI.

Maps the number of ``-v`` flags (and ``--quiet``) to a logging level.
"""

from __future__ import annotations

import logging
from enum import IntEnum


class VerbosityLevel(IntEnum):
    """Verbosity levels for the CLI."""

    QUIET = 0  # Only errors
    NORMAL = 1  # Default: warnings and errors
    VERBOSE = 2  # -v: informational messages
    DEBUG = 3  # -vv: debug messages


class VerbosityManager:
    """Manages verbosity levels and maps them to logging levels."""

    COUNT_TO_LEVEL: dict[int, VerbosityLevel] = {
        0: VerbosityLevel.NORMAL,
        1: VerbosityLevel.VERBOSE,
        2: VerbosityLevel.DEBUG,
    }

    LEVEL_TO_LOGGING: dict[VerbosityLevel, int] = {
        VerbosityLevel.QUIET: logging.ERROR,
        VerbosityLevel.NORMAL: logging.WARNING,
        VerbosityLevel.VERBOSE: logging.INFO,
        VerbosityLevel.DEBUG: logging.DEBUG,
    }

    def __init__(self, verbosity_count: int = 0, quiet: bool = False):
        """Initialize verbosity manager.

        Args:
            verbosity_count: Number of -v flags (clamped to 0-2)
            quiet: Quiet mode wins over any -v flags

        """
        self.verbosity_count = max(0, min(2, verbosity_count))
        if quiet:
            self.level = VerbosityLevel.QUIET
        else:
            self.level = self.COUNT_TO_LEVEL[self.verbosity_count]
        self.logging_level = self.LEVEL_TO_LOGGING[self.level]

    @classmethod
    def from_count(cls, count: int, quiet: bool = False) -> VerbosityManager:
        """Create VerbosityManager from the -v count."""
        return cls(count, quiet=quiet)
