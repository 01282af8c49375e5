# src/taskbell/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a local default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBELL"

PERMISSION_STATES = ("default", "granted", "denied")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Reminders ----
    reminder_interval_seconds: float
    reminder_window_seconds: float

    # ---- Notification channels ----
    system_notifications: str
    notification_timeout_seconds: float
    audio_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskbell").strip() or "taskbell"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskbell"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 1.0)
        reminder_window_seconds = _env_float(_k("REMINDER_WINDOW_SECONDS"), 5.0)

        system_notifications = _env_choice(_k("SYSTEM_NOTIFICATIONS"), PERMISSION_STATES, "default")
        notification_timeout_seconds = _env_float(_k("NOTIFICATION_TIMEOUT_SECONDS"), 10.0)
        audio_enabled = _env_bool(_k("AUDIO_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            reminder_interval_seconds=max(0.1, reminder_interval_seconds),
            reminder_window_seconds=max(0.0, reminder_window_seconds),
            system_notifications=system_notifications,
            notification_timeout_seconds=max(0.0, notification_timeout_seconds),
            audio_enabled=audio_enabled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
