from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file rotation and explicit shutdown.
"""

import logging
import time
from logging.handlers import QueueListener, RotatingFileHandler
from pathlib import Path
from typing import Iterator

import pytest

from composter.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Clean up root logger handlers before and after each test."""
    root = logging.getLogger()
    previous_level = root.level

    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener and isinstance(listener, QueueListener):
        shutdown_logging()

    yield

    shutdown_logging()
    root.setLevel(previous_level)


def test_logging_idempotency() -> None:
    """TC-01: Verify that multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_force_reconfigures_level() -> None:
    """TC-02: Verify that 'force' replaces an existing configuration."""
    configure_logging(LoggingConfig(level="WARNING"))
    configure_logging(LoggingConfig(level="DEBUG"), force=True)

    root = logging.getLogger()
    ours = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert root.level == logging.DEBUG
    assert len(ours) == 1


def test_log_rotation(tmp_path: Path) -> None:
    """TC-03: Verify file rotation when size limit is exceeded."""
    log_file = tmp_path / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1
    )

    configure_logging(cfg)
    logger = logging.getLogger("composter.test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    assert log_file.exists()
    assert (tmp_path / "test_rotate.log.1").exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """TC-04: Verify that the root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    queue_handlers = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(queue_handlers) > 0
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_shutdown_detaches_handlers() -> None:
    """TC-05: Verify that shutdown restores an unconfigured root logger."""
    configure_logging(LoggingConfig(level="INFO"))
    shutdown_logging()

    root = logging.getLogger()
    assert not [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]
    assert getattr(root, _QUEUE_LISTENER_ATTR, None) is None
    assert not hasattr(root, _CONFIGURED_FLAG_ATTR)

    # A second shutdown is harmless
    shutdown_logging()


def test_unknown_level_stays_quiet() -> None:
    """TC-06: Verify that an unrecognized level string falls back to WARNING."""
    configure_logging(LoggingConfig(level="chatty"))

    assert logging.getLogger().level == logging.WARNING


def test_cli_policy_is_quiet_by_default() -> None:
    """TC-07: Verify the default CLI policy: warnings on stderr, no file."""
    cfg = LoggingConfig.for_cli()

    assert cfg.level == "WARNING"
    assert cfg.console is True
    assert cfg.log_file is None


def test_cli_debug_policy_adds_diagnostic_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """TC-08: Verify '--debug' selects DEBUG and the rotating file under the data dir."""
    monkeypatch.setattr("composter.infra.logging.config.get_user_data_dir", lambda: str(tmp_path))

    cfg = LoggingConfig.for_cli(debug=True)

    assert cfg.level == "DEBUG"
    assert cfg.log_file == str(tmp_path / "logs" / "composter.log")
    assert cfg.log_file == get_default_log_path()


def test_shutdown_releases_diagnostic_file(tmp_path: Path) -> None:
    """TC-09: Verify the rotating file is closed when logging shuts down."""
    configure_logging(LoggingConfig(level="DEBUG", console=False, log_file=str(tmp_path / "diag.log")))
    listener = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)
    file_sinks = [h for h in listener.handlers if isinstance(h, RotatingFileHandler)]

    shutdown_logging()

    assert len(file_sinks) == 1
    assert file_sinks[0].stream is None
