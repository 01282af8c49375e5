# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskbell.core.state import AppState
from taskbell.reminders.notifiers import NotificationDispatcher, Permission
from taskbell.reminders.reminder_loop import DueTaskChecker
from taskbell.tasks.task_controller import TodoController
from taskbell.tasks.task_store import TaskStore

from .fakes import FakeBackend, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskbell-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        reminder_interval_seconds=0.01,
        reminder_window_seconds=5.0,
        system_notifications="denied",
        notification_timeout_seconds=10.0,
        audio_enabled=False,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def controller(store: TaskStore) -> TodoController:
    c = TodoController(store)
    c.attach()
    yield c
    c.detach()


@pytest.fixture()
def recorder() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, controller: TodoController, recorder) -> AppState:
    """
    AppState wired with a fake notification channel.

    NOTE: We keep the real SQLite store here because its correctness
    (ordering, change notifications) is part of what we want to test.
    """
    return AppState(
        settings=settings,
        task_store=store,
        controller=controller,
        dispatcher=NotificationDispatcher([recorder]),
        checker=DueTaskChecker(),
        notification_backend=FakeBackend(Permission.DENIED),
    )
