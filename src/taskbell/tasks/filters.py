# src/taskbell/tasks/filters.py

from __future__ import annotations

from collections.abc import Iterable

from .task_models import FilterMode, Task


def matches(task: Task, mode: FilterMode) -> bool:
    if mode == FilterMode.ACTIVE:
        return not task.completed
    if mode == FilterMode.COMPLETED:
        return task.completed
    return True


def filter_tasks(tasks: Iterable[Task], mode: FilterMode | str) -> list[Task]:
    """Order-preserving projection of tasks onto a filter mode."""
    if not isinstance(mode, FilterMode):
        mode = FilterMode.parse(mode)
    return [t for t in tasks if matches(t, mode)]


def count_active(tasks: Iterable[Task]) -> int:
    return sum(1 for t in tasks if not t.completed)
