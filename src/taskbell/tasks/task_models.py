# src/taskbell/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FilterMode(StrEnum):
    """Which slice of the task list is shown."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> FilterMode:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.ALL


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    text: str
    user_date: str | None
    completed: bool = False
    created_at: float = 0.0
