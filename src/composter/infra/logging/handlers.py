from __future__ import annotations

"""
Sink Handlers for the Logging Queue.

Builds the handlers drained by the QueueListener: the stderr stream and
the optional diagnostic file. Every handler composter creates is tagged so
teardown never touches handlers installed by pytest or by a host
application embedding the crawler.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from composter.infra.logging.config import LoggingConfig

_HANDLER_TAG_ATTR: str = "_composter_handler"


def _tag_handler(handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _build_sinks(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    """
    Create the handlers selected by a configuration.

    Args:
        cfg: Logging settings of the current invocation.
        level_int: Numeric threshold applied to every sink.

    Returns:
        List[logging.Handler]: Tagged handlers, possibly empty.
    """
    sinks: List[logging.Handler] = []

    if cfg.console:
        # Looked up at call time so captured or redirected streams are honoured
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter(cfg.console_fmt))
        sinks.append(stream)

    if cfg.log_file:
        diagnostic = _open_diagnostic_file(cfg)
        if diagnostic is not None:
            diagnostic.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
            sinks.append(diagnostic)

    for sink in sinks:
        sink.setLevel(level_int)
        _tag_handler(sink)
    return sinks


def _open_diagnostic_file(cfg: LoggingConfig) -> Optional[RotatingFileHandler]:
    """
    Open the rotating diagnostic file.

    A file that cannot be opened only costs the diagnostics, never the
    command: the failure is reported on stderr and None is returned.
    """
    try:
        os.makedirs(os.path.dirname(os.path.abspath(cfg.log_file)), exist_ok=True)
        return RotatingFileHandler(
            cfg.log_file,
            maxBytes=int(cfg.max_bytes),
            backupCount=int(cfg.backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Diagnostic log disabled, cannot open '{cfg.log_file}': {e}\n")
        return None
