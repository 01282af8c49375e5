# src/taskbell/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Loggers that stay off the console below the given level.
# The reminder loop ticks every second.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskbell.reminders.reminder_loop": logging.WARNING,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter: taskbell logs pass unless listed in _CONSOLE_THRESHOLDS;
    third-party libraries and captured Python warnings ('py.warnings') only at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, level in _CONSOLE_THRESHOLDS.items():
            if record.name.startswith(prefix):
                return record.levelno >= level
        if record.name.startswith("taskbell."):
            return True
        return record.levelno >= logging.ERROR


def _configured(handler: logging.Handler, level: int, *filters: logging.Filter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    for f in filters:
        handler.addFilter(f)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskbell",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    file_name: str = "taskbell.log",
) -> Path:
    """
    Route all logging to a filtered stderr handler and a full log file.

    Safe to call again: handlers from an earlier call are closed and replaced.
    Returns the log file path.
    """
    log_file = Path(log_dir) / file_name
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    root.setLevel(min(console_level, file_level))

    root.addHandler(_configured(logging.StreamHandler(sys.stderr), console_level, _ConsoleNoiseFilter()))
    root.addHandler(_configured(logging.FileHandler(str(log_file), encoding="utf-8"), file_level))

    # warnings.warn(...) arrives as 'py.warnings'
    logging.captureWarnings(True)
    logging.getLogger(__name__).debug("Logging to %s", log_file)
    return log_file
