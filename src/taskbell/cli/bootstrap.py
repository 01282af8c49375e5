# src/taskbell/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, controller and notification channels into AppState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import get_settings
from ..core.state import AppState
from ..reminders.notifiers import (
    AudioNotifier,
    NotificationDispatcher,
    NotifySendBackend,
    Permission,
    SystemNotifier,
    ToastNotifier,
)
from ..reminders.reminder_loop import DueTaskChecker
from ..tasks.task_controller import TodoController
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_backend(settings) -> NotifySendBackend:
    """Configured "denied" is final; otherwise ask the backend once at startup."""
    wanted = Permission.parse(settings.system_notifications)
    if wanted == Permission.DENIED:
        return NotifySendBackend(app_name=settings.app_name, permission=Permission.DENIED)

    backend = NotifySendBackend(app_name=settings.app_name)
    if backend.request_permission() != Permission.GRANTED and wanted == Permission.GRANTED:
        logger.warning("System notifications requested but %s is not available.", backend.executable)
    return backend


def create_initial_state(
    *,
    settings=None,
    emit: Callable[[str], None] = print,
    on_focus: Callable[[], None] | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    emit receives in-app toast lines; on_focus runs when a system alert is clicked.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(settings.tasks_db_path)
    controller = TodoController(store)

    backend = _build_backend(settings)
    logger.info(
        "Notification channels: system=%s audio=%s",
        backend.permission().value,
        settings.audio_enabled,
    )

    dispatcher = NotificationDispatcher(
        [
            SystemNotifier(
                backend,
                timeout_seconds=settings.notification_timeout_seconds,
                on_focus=on_focus,
            ),
            ToastNotifier(emit),
            AudioNotifier(enabled=settings.audio_enabled),
        ]
    )

    return AppState(
        settings=settings,
        task_store=store,
        controller=controller,
        dispatcher=dispatcher,
        checker=DueTaskChecker(window_ms=int(settings.reminder_window_seconds * 1000)),
        notification_backend=backend,
    )
