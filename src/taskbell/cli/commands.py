# src/taskbell/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks.task_controller import TaskActionError, TodoController
from ..tasks.task_models import FilterMode, Task
from ..tasks.task_store import TaskStoreError

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /done, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Store write failures and refused actions become short replies; anything
        else propagates to the caller.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except TaskActionError as e:
            return str(e)
        except TaskStoreError as e:
            return f"Could not save changes: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:", "  <text> - add a task (e.g. 'Buy milk 25/12/2025 6:30 PM')"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def format_task(task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    line = f"{box} #{task.id} {task.text}"
    if task.user_date:
        line += f"  ({task.user_date})"
    return line


def format_task_list(controller: TodoController) -> str:
    visible = controller.visible_tasks()
    mode = controller.state.filter
    lines = [format_task(t) for t in visible] or ["(no tasks)"]
    lines.append(f"{controller.active_count()} items left | filter: {mode.value}")
    return "\n".join(lines)


def _parse_id(args: list[str], usage: str) -> int:
    if not args:
        raise TaskActionError(usage)
    try:
        return int(args[0].lstrip("#"))
    except ValueError:
        raise TaskActionError(usage) from None


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    if args:
        state.controller.set_filter(args[0])
    return format_task_list(state.controller)


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter                       -> show current filter
    /filter all|active|completed  -> switch filter and show the list
    """
    if not args:
        return f"Filter is '{state.controller.state.filter.value}'. Use /filter all|active|completed."
    raw = args[0].lower()
    if raw not in {m.value for m in FilterMode}:
        return "Usage: /filter all|active|completed."
    state.controller.set_filter(raw)
    return format_task_list(state.controller)


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args, "Usage: /done <id>.")
    completed = state.controller.toggle_complete(task_id)
    return f"Task #{task_id} marked {'completed' if completed else 'active'}."


def cmd_edit(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args, "Usage: /edit <id>.")
    task = state.controller.start_edit(task_id)
    return (
        f"Editing #{task.id}: text='{task.text}' date='{task.user_date or ''}'\n"
        "Use /save <new text> | <new date> (either part may be left out), or /cancel."
    )


def cmd_save(state: AppState, args: list[str]) -> str:
    """
    /save                    -> save the edit buffer unchanged
    /save new text           -> replace the text, keep the date
    /save new text | date    -> replace both
    /save | date             -> replace only the date ("/save |" clears it)
    """
    raw = " ".join(args)
    text: str | None = None
    user_date: str | None = None
    if "|" in raw:
        left, right = raw.split("|", 1)
        text = left.strip() or None
        user_date = right.strip()
    elif raw.strip():
        text = raw.strip()

    task_id = state.controller.save_edit(text=text, user_date=user_date)
    return f"Task #{task_id} saved."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if state.controller.state.editing_id is None:
        return "Nothing is being edited."
    state.controller.cancel_edit()
    return "Edit cancelled."


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args, "Usage: /del <id>.")
    state.controller.delete_task(task_id)
    return f"Task #{task_id} deleted."


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    n = state.controller.clear_completed()
    if n and emit is not None:
        emit(format_task_list(state.controller))
    return f"Cleared {n} completed task(s)."


def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    backend = state.notification_backend
    system = backend.permission().value if backend is not None else "n/a"
    return (
        "Status:\n"
        f"  Tasks: {len(state.controller.tasks)} ({state.controller.active_count()} active)\n"
        f"  Reminders sent this session: {len(state.checker.fired_ids)}\n"
        f"  System notifications: {system}\n"
        f"  Audio cue: {'ON' if getattr(s, 'audio_enabled', False) else 'OFF'}\n"
        f"  Database: {getattr(s, 'tasks_db_path', '?')}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks: /list [all|active|completed].", aliases=["ls"])
registry.register("filter", cmd_filter, help_text="Switch filter: /filter all | active | completed.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Start editing a task: /edit <id>.")
registry.register("save", cmd_save, help_text="Save the edit: /save <text> | <date>.")
registry.register("cancel", cmd_cancel, help_text="Cancel the current edit.")
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["rm", "delete"])
registry.register("clear", cmd_clear, help_text="Delete all completed tasks.")
registry.register("status", cmd_status, help_text="Show reminder/notification status.")
