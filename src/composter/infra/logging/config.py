from __future__ import annotations

"""
Logging Policy for the Composter CLI.

The CLI is quiet by default: only warnings reach stderr, i.e. unresolved
imports, virtual path collisions, unreadable manifests and missing
dependencies. '--debug' lowers the threshold to DEBUG, which traces every
bundled file, written file and HTTP request, and mirrors the stream into
a rotating diagnostic file under the user data directory.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

from composter.infra.fs import get_user_data_dir

QUIET_LEVEL = "WARNING"
DEBUG_LEVEL = "DEBUG"
LOG_DIR_NAME = "logs"
LOG_FILE_NAME = "composter.log"

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_default_log_path(file_name: str = LOG_FILE_NAME) -> str:
    """Resolve the diagnostic log path within the user data directory."""
    return os.path.join(get_user_data_dir(), LOG_DIR_NAME, file_name)


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings consumed by configure_logging.

    Attributes:
        level: Threshold for the root logger and every handler.
        console: Echo records to stderr. Results go to stdout, so warnings
                 never corrupt '--json' output.
        log_file: Rotating diagnostic file, or None to skip it.
        max_bytes: Size at which the diagnostic file rolls over.
        backup_count: Rolled-over files kept next to it.
        console_fmt: Terminal format, kept short for interactive use.
        file_fmt: File format, with the logger name so crawl, unpack and
                  network records can be told apart.
        datefmt: Timestamp format of file records.
    """
    level: str = QUIET_LEVEL
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def for_cli(cls, debug: bool = False) -> LoggingConfig:
        """
        Build the configuration for one CLI invocation.

        Args:
            debug: Whether '--debug' was given.

        Returns:
            LoggingConfig: WARNING on stderr only, or DEBUG on stderr plus
                           the diagnostic file.
        """
        if debug:
            return cls(level=DEBUG_LEVEL, log_file=get_default_log_path())
        return cls(level=QUIET_LEVEL)
