# src/taskbell/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The controller and the reminder loop depend on Protocols instead of concrete
implementations, so the store and the notification channels stay swappable and
easy to fake in tests.
"""

from collections.abc import Callable, Sequence
from typing import Any, Protocol

ChangeListener = Callable[[str], None]
# Called with the change kind: "insert", "update", "delete".


class TaskRepo(Protocol):
    """Store collaborator: plain CRUD plus a change-notification stream."""

    def list_tasks(self) -> list[Any]: ...

    def insert_task(self, *, text: str, user_date: str | None, completed: bool = False) -> int: ...

    def update_task(
            self,
            task_id: int,
            *,
            text: str | None = None,
            user_date: str | None = None,
            clear_user_date: bool = False,
            completed: bool | None = None,
    ) -> None: ...

    def delete_task(self, task_id: int) -> None: ...
    def delete_completed(self) -> int: ...

    def subscribe(self, listener: ChangeListener) -> int: ...
    def unsubscribe(self, token: int) -> None: ...


class TaskSource(Protocol):
    """Anything the reminder loop can read the current task list from."""

    @property
    def tasks(self) -> Sequence[Any]: ...


class Notifier(Protocol):
    """One reminder channel (system alert, in-app toast, audio cue)."""

    name: str

    def notify(self, task: Any) -> None: ...
