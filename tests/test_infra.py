"""Tests for logging setup and the uncaught-exception hook."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import Iterator

import pytest

from busreader.config import LoggingConfig
from busreader.infra import configure_logging
from busreader.infra.exceptions import UncaughtExceptionLogger


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_log_records_reach_the_rotating_file(tmp_path: Path, restore_root_logging: None) -> None:
    log_path = tmp_path / "nested" / "busreader.log"
    returned = configure_logging(
        LoggingConfig(level="DEBUG", filepath=log_path, console=False, quiet_loggers=("ultralytics", "PIL"))
    )
    assert returned == log_path.resolve()

    logging.getLogger("consensus.engine").debug("Announcing route %s", "5B")
    for handler in logging.getLogger().handlers:
        handler.flush()

    contents = log_path.read_text(encoding="utf-8")
    assert "| DEBUG    | consensus.engine | Announcing route 5B" in contents
    assert logging.getLogger("ultralytics").level == logging.WARNING
    assert logging.getLogger("PIL").level == logging.WARNING


def test_hook_logs_and_chains_to_previous(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    chained = []
    monkeypatch.setattr(sys, "excepthook", lambda *exc_info: chained.append(exc_info[0]))
    hook = UncaughtExceptionLogger()
    hook.install()
    try:
        assert sys.excepthook == hook._on_main_thread_exception
        with caplog.at_level(logging.CRITICAL, logger="app.exceptions"):
            sys.excepthook(RuntimeError, RuntimeError("boom"), None)
    finally:
        hook.uninstall()
    assert chained == [RuntimeError]
    assert "Unhandled exception: boom" in caplog.text


def test_uninstall_restores_previous_hooks() -> None:
    before_sys, before_thread = sys.excepthook, threading.excepthook
    hook = UncaughtExceptionLogger()
    hook.install()
    hook.install()
    hook.uninstall()
    assert sys.excepthook is before_sys
    assert threading.excepthook is before_thread
