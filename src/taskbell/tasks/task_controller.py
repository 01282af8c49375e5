# src/taskbell/tasks/task_controller.py

"""
Task list controller.

Owns the UI state (task list, filter, edit buffer, pending input) and talks to the
store. Writes do not touch the in-memory list directly: the store announces each
change and the controller reloads everything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..core.ports import TaskRepo
from .date_parsing import parse_user_date, remove_date_time, resolve_user_date
from .filters import count_active, filter_tasks
from .task_models import FilterMode, Task
from .task_store import TaskStoreError

logger = logging.getLogger(__name__)


class TaskActionError(ValueError):
    """The requested action is not allowed for the current state (unknown id, completed task...)."""


@dataclass
class TodoState:
    tasks: list[Task] = field(default_factory=list)
    filter: FilterMode = FilterMode.ALL
    new_task: str = ""

    editing_id: int | None = None
    editing_text: str = ""
    editing_date: str = ""


class TodoController:
    def __init__(self, repo: TaskRepo, state: TodoState | None = None) -> None:
        self.repo = repo
        self.state = state or TodoState()
        self._token: int | None = None

    # ---- change stream ----

    def attach(self) -> None:
        """Load the list and reload it on every store change."""
        if self._token is None:
            self._token = self.repo.subscribe(self._on_change)
        self.load_tasks()

    def detach(self) -> None:
        if self._token is not None:
            self.repo.unsubscribe(self._token)
            self._token = None

    def _on_change(self, kind: str) -> None:
        logger.debug("Store change kind=%s, reloading", kind)
        self.load_tasks()

    # ---- read side ----

    @property
    def tasks(self) -> list[Task]:
        return self.state.tasks

    def load_tasks(self) -> list[Task]:
        """Reload from the store; on failure keep the previous list."""
        try:
            self.state.tasks = list(self.repo.list_tasks())
        except Exception:
            logger.exception("Failed to load tasks; keeping %d cached", len(self.state.tasks))
        return self.state.tasks

    def visible_tasks(self) -> list[Task]:
        return filter_tasks(self.state.tasks, self.state.filter)

    def active_count(self) -> int:
        return count_active(self.state.tasks)

    def find(self, task_id: int) -> Task | None:
        for t in self.state.tasks:
            if t.id == task_id:
                return t
        return None

    def _require(self, task_id: int, *, editable: bool = False) -> Task:
        task = self.find(task_id)
        if task is None:
            raise TaskActionError(f"No task with id {task_id}.")
        if editable and task.completed:
            raise TaskActionError(f"Task {task_id} is completed.")
        return task

    # ---- write side ----

    def set_filter(self, mode: FilterMode | str) -> FilterMode:
        self.state.filter = mode if isinstance(mode, FilterMode) else FilterMode.parse(mode)
        return self.state.filter

    def add_task(self, raw_text: str | None = None) -> int | None:
        """
        Create a task from free text. Returns the new id, or None for blank input.

        The input buffer is cleared whether or not the store accepts the write.
        """
        text = self.state.new_task if raw_text is None else raw_text
        if not text or not text.strip():
            return None

        user_date = resolve_user_date(text)
        clean = remove_date_time(text) or text.strip()
        try:
            task_id = self.repo.insert_task(text=clean, user_date=user_date, completed=False)
            logger.info("Task created id=%s user_date=%s", task_id, user_date)
            return task_id
        except TaskStoreError:
            logger.exception("Failed to create task")
            raise
        finally:
            self.state.new_task = ""

    def start_edit(self, task_id: int) -> Task:
        task = self._require(task_id, editable=True)
        self.state.editing_id = task.id
        self.state.editing_text = task.text
        self.state.editing_date = task.user_date or ""
        return task

    def cancel_edit(self) -> None:
        self.state.editing_id = None
        self.state.editing_text = ""
        self.state.editing_date = ""

    def save_edit(self, text: str | None = None, user_date: str | None = None) -> int:
        """Write the edit buffer (optionally overridden) back. An empty date removes it."""
        task_id = self.state.editing_id
        if task_id is None:
            raise TaskActionError("Nothing is being edited.")

        if text is not None:
            self.state.editing_text = text
        if user_date is not None:
            self.state.editing_date = user_date

        new_text = self.state.editing_text.strip()
        new_date = self.state.editing_date.strip()
        if not new_text:
            raise TaskActionError("Task text must not be empty.")
        if new_date and parse_user_date(new_date) is None:
            raise TaskActionError(f"Unrecognized date {new_date!r}; use DD-MM-YYYY [HH:MM] [AM|PM].")

        try:
            self.repo.update_task(
                task_id,
                text=new_text,
                user_date=new_date or None,
                clear_user_date=not new_date,
            )
            logger.info("Task edited id=%s user_date=%s", task_id, new_date or None)
            return task_id
        except TaskStoreError:
            logger.exception("Failed to save edit task_id=%s", task_id)
            raise
        finally:
            self.cancel_edit()

    def delete_task(self, task_id: int) -> None:
        self._require(task_id, editable=True)
        try:
            self.repo.delete_task(task_id)
        except TaskStoreError:
            logger.exception("Failed to delete task_id=%s", task_id)
            raise
        if self.state.editing_id == task_id:
            self.cancel_edit()

    def toggle_complete(self, task_id: int) -> bool:
        """Flip completion; returns the new value."""
        task = self._require(task_id)
        completed = not task.completed
        try:
            self.repo.update_task(task_id, completed=completed)
        except TaskStoreError:
            logger.exception("Failed to toggle task_id=%s", task_id)
            raise
        return completed

    def clear_completed(self) -> int:
        try:
            return self.repo.delete_completed()
        except TaskStoreError:
            logger.exception("Failed to clear completed tasks")
            raise
