# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskbell.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("taskbell.tasks.task_store", logging.DEBUG, True),
        ("taskbell.reminders.reminder_loop", logging.INFO, False),
        ("taskbell.reminders.reminder_loop", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("asyncio", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_file_and_replaces_handlers(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path)
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

    assert log_file == tmp_path / "logs" / "taskbell.log"
    assert len(logging.getLogger().handlers) == 2

    logging.getLogger("taskbell.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")
