from __future__ import annotations

"""
Logging Settings.

Holds the severity names accepted in the pathmanifest configuration and the
frozen LoggingConfig handed to configure_logging(). A CLI run logs to stderr;
the rotating file under the user data directory is opt-in.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

# Accepted 'log_level' values; 'WARN' is tolerated as an alias only
_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass(frozen=True)
class LoggingConfig:
    """
    How a pathmanifest process reports index builds, duplicate resolutions
    and command failures.

    Attributes:
        level: Name from LOG_LEVELS.
        console: Mirror records to stderr, keeping stdout for query output.
        log_file: Rotating log file, or None to stay console-only.
        max_bytes: Rollover size. Manifest loads log a handful of lines, so
                   a small file holds many runs.
        backup_count: Rotated files kept next to log_file.
        console_fmt: stderr record layout.
        file_fmt: Log file record layout.
        datefmt: Timestamp layout of file records.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 512 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_settings(
            cls,
            settings: Mapping[str, Any],
            log_file: Optional[str] = None,
    ) -> "LoggingConfig":
        """
        Derive logging settings from a validated pathmanifest configuration.

        Args:
            settings: Output of validate_config(); only 'log_level' is read.
            log_file: Explicit log file, already resolved by the caller.
        """
        return cls(level=settings.get("log_level", "INFO"), console=True, log_file=log_file)
