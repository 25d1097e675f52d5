from __future__ import annotations

"""
Logging Configuration Models.

Defines the settings the CLI passes to the logging subsystem and the mapping
from textual severity names to native logging levels.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem initialization.

    Attributes:
        level: Minimum severity level to capture.
        console: Write records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size of one log file before it is rotated.
        backup_count: Rotated files kept next to the active one.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None
    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3
