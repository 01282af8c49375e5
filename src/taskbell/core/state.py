# src/taskbell/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..reminders.notifiers import NotificationDispatcher
from ..reminders.reminder_loop import DueTaskChecker
from ..tasks.task_controller import TodoController
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    controller: TodoController
    dispatcher: NotificationDispatcher
    checker: DueTaskChecker = field(default_factory=DueTaskChecker)
    notification_backend: Any = None
