# tests/test_commands.py

from __future__ import annotations

from taskbell.cli.commands import CommandRegistry, format_task, registry
from taskbell.connectors.console_connector import handle_line
from taskbell.tasks.task_models import Task


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    notes: list[str] = []
    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_plain_line_adds_task(state) -> None:
    reply = handle_line(state, "Buy milk 25/12/2025 6:30 PM")
    assert reply is not None and reply.startswith("Added #")
    assert "due 25/12/2025 6:30 PM" in reply

    listing = registry.handle(state, "/list") or ""
    assert "[ ] #" in listing
    assert "Buy milk  (25/12/2025 6:30 PM)" in listing
    assert "1 items left" in listing


def test_done_edit_save_delete_clear(state) -> None:
    handle_line(state, "a")
    handle_line(state, "b 1/2/2026")
    a, b = sorted(t.id for t in state.controller.tasks)

    assert registry.handle(state, f"/done {a}") == f"Task #{a} marked completed."
    assert "completed" in (registry.handle(state, f"/edit {a}") or "")
    assert "Usage" in (registry.handle(state, "/done") or "")
    assert "Usage" in (registry.handle(state, "/done abc") or "")

    assert "Editing" in (registry.handle(state, f"/edit #{b}") or "")
    assert registry.handle(state, "/save b moved | 2/2/2026 10:00 AM") == f"Task #{b} saved."
    task = state.controller.find(b)
    assert task is not None
    assert task.text == "b moved"
    assert task.user_date == "2/2/2026 10:00 AM"

    registry.handle(state, f"/edit {b}")
    registry.handle(state, "/save |")
    task = state.controller.find(b)
    assert task is not None and task.user_date is None
    assert registry.handle(state, "/cancel") == "Nothing is being edited."

    emitted: list[str] = []
    assert registry.handle(state, "/clear", emit=emitted.append) == "Cleared 1 completed task(s)."
    assert emitted and "items left" in emitted[0]

    assert registry.handle(state, f"/del {b}") == f"Task #{b} deleted."
    assert state.controller.tasks == []
    assert "No task with id" in (registry.handle(state, f"/del {b}") or "")


def test_filter_command(state) -> None:
    handle_line(state, "a")
    assert "filter: active" in (registry.handle(state, "/filter active") or "")
    assert "Usage" in (registry.handle(state, "/filter later") or "")
    assert "'active'" in (registry.handle(state, "/filter") or "")
    assert "filter: completed" in (registry.handle(state, "/ls completed") or "")
    assert "(no tasks)" in (registry.handle(state, "/ls") or "")


def test_status_and_help(state) -> None:
    assert "/done" in (registry.handle(state, "/help") or "")
    status = registry.handle(state, "/status") or ""
    assert "System notifications: denied" in status
    assert "Reminders sent this session: 0" in status


def test_format_task() -> None:
    assert format_task(Task(id=2, text="x", user_date=None, completed=True)) == "[x] #2 x"
