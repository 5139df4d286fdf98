from __future__ import annotations

"""
Logging Core Orchestrator.

Maintains the idempotent lifecycle of the logging subsystem. Records are
pushed through a QueueHandler and drained by a QueueListener thread, so
console and file I/O never stall a crawl or an unpack.
"""

import atexit
import logging
import queue
from logging.handlers import QueueHandler, QueueListener
from typing import Optional

from composter.infra.logging.config import _LEVEL_MAP, QUIET_LEVEL, LoggingConfig
from composter.infra.logging.handlers import _build_sinks, _is_our_handler, _tag_handler

_CONFIGURED_FLAG_ATTR: str = "_composter_configured"
_QUEUE_LISTENER_ATTR: str = "_composter_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Route all composter records through a queue to the configured sinks.

    Only the first call per process takes effect unless 'force' is set;
    forcing tears down the sinks and listener of the previous call.

    Args:
        cfg: Settings of the current invocation, usually LoggingConfig.for_cli().
        force: Replace an existing configuration.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    already_configured = bool(getattr(root, _CONFIGURED_FLAG_ATTR, False))
    if already_configured and not force:
        return root

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)

    _remove_our_handlers(root)
    _stop_existing_listener(root)

    handlers_list = _build_sinks(cfg, level_int)
    if not handlers_list:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)

    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()

    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)

    # Flush pending records on interpreter shutdown
    atexit.register(_safe_stop_listener, listener)

    return root


def shutdown_logging() -> None:
    """Stop the listener and detach composter handlers from the root logger."""
    root = logging.getLogger()
    _stop_existing_listener(root)
    _remove_our_handlers(root)
    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    """Convert a level name to its numeric constant; unknown names stay quiet."""
    quiet = _LEVEL_MAP[QUIET_LEVEL]
    if not level:
        return quiet
    return _LEVEL_MAP.get(str(level).strip().upper(), quiet)


def _remove_our_handlers(root: logging.Logger) -> None:
    """Detach every composter-managed handler from the root."""
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    """Terminate and release the existing QueueListener to reset state."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating listeners that were already stopped.

    QueueListener.stop() fails when its thread has been joined, which
    happens when atexit fires after an explicit shutdown.
    """
    if not listener:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
    # Releases the diagnostic file; stream sinks leave stderr open
    for sink in listener.handlers:
        sink.close()
