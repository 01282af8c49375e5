# src/taskbell/reminders/reminder_loop.py

from __future__ import annotations

"""
Due-task reminder loop.

A small polling loop that, every tick:
- reads the current task list from the controller,
- finds tasks whose due instant is within the tolerance window of "now",
- dispatches a reminder once per task id for the whole session.

Per-task state is pending -> fired, and fired is terminal. The fired set is
in-memory only: a restart forgets it, and editing a task's date does not reset it.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from ..core.ports import TaskSource
from ..tasks.date_parsing import parse_user_date
from ..tasks.task_models import Task
from .notifiers import NotificationDispatcher

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MS = 5000


class DueTaskChecker:
    """Decides which tasks are due on a tick and remembers which were notified."""

    def __init__(self, window_ms: int = DEFAULT_WINDOW_MS) -> None:
        self.window_ms = int(window_ms)
        self._fired: set[int] = set()

    @property
    def fired_ids(self) -> frozenset[int]:
        return frozenset(self._fired)

    def is_fired(self, task_id: int) -> bool:
        return task_id in self._fired

    def is_due(self, task: Task, now: datetime) -> bool:
        if task.completed or task.id in self._fired:
            return False
        due = parse_user_date(task.user_date)
        if due is None:
            return False
        delta_ms = (due - now).total_seconds() * 1000.0
        return -self.window_ms <= delta_ms <= self.window_ms

    def check(
        self,
        tasks: Iterable[Task],
        now: datetime,
        on_fire: Callable[[Task], object] | None = None,
    ) -> list[Task]:
        """
        Fire every due task once.

        on_fire runs before the id is recorded; the id is recorded even if on_fire
        raises, so one broken reminder cannot repeat every second.
        """
        fired: list[Task] = []
        for task in tasks:
            if not self.is_due(task, now):
                continue
            try:
                if on_fire is not None:
                    on_fire(task)
            finally:
                self._fired.add(task.id)
            fired.append(task)
        return fired


def run_check(
    source: TaskSource,
    dispatcher: NotificationDispatcher,
    checker: DueTaskChecker,
    now: datetime | None = None,
) -> list[Task]:
    """One tick of the reminder loop."""
    now = now or datetime.now()
    tasks = list(source.tasks)
    logger.debug("Reminder tick now=%s tasks=%d", now.isoformat(timespec="seconds"), len(tasks))

    fired = checker.check(tasks, now, on_fire=dispatcher.dispatch)
    for task in fired:
        logger.info("Reminder sent task_id=%s text=%r due=%s", task.id, task.text, task.user_date)
    return fired


async def run_reminder_loop(
        source: TaskSource,
        dispatcher: NotificationDispatcher,
        *,
        interval_seconds: float = 1.0,
        checker: DueTaskChecker | None = None,
        clock: Callable[[], datetime] = datetime.now,
) -> None:
    """
    Polling reminder loop.

    Runs a check immediately, then every interval_seconds. A failing tick is logged
    and the loop keeps going. To stop it, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    checker = checker or DueTaskChecker()

    logger.info("Reminder loop started interval=%.2fs window=%dms", sleep_s, checker.window_ms)
    try:
        while True:
            try:
                run_check(source, dispatcher, checker, now=clock())
            except Exception:
                logger.exception("Reminder tick failed")
            await asyncio.sleep(sleep_s)
    finally:
        logger.info("Reminder loop stopped fired=%d", len(checker.fired_ids))
