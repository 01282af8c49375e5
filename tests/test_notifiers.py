# tests/test_notifiers.py

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import pytest

from taskbell.reminders import notifiers
from taskbell.reminders.notifiers import (
    AudioNotifier,
    NotificationDispatcher,
    NotifySendBackend,
    NotifySendHandle,
    Permission,
    SystemNotifier,
    ToastNotifier,
    build_reminder,
)
from taskbell.tasks.task_models import Task

from .fakes import BrokenNotifier, FakeBackend, RecordingNotifier

TASK = Task(id=3, text="Buy milk", user_date="25/12/2025 6:30 PM")


def test_reminder_content() -> None:
    r = build_reminder(TASK)
    assert r.title == "⏰ Task Reminder!"
    assert r.body == "It's time for: Buy milk"
    assert r.tag == "task-3"
    assert r.require_interaction


def test_toast_always_emits() -> None:
    lines: list[str] = []
    ToastNotifier(lines.append).notify(TASK)
    assert lines == ["⏰ Task Reminder! It's time for: Buy milk"]


def test_dispatcher_isolates_failing_channels() -> None:
    broken = BrokenNotifier()
    recorder = RecordingNotifier()
    lines: list[str] = []
    dispatcher = NotificationDispatcher([broken, ToastNotifier(lines.append), recorder])

    failed = dispatcher.dispatch(TASK)

    assert failed == ["broken"]
    assert recorder.seen == [TASK]
    assert len(lines) == 1


def test_system_channel_is_silent_without_permission() -> None:
    backend = FakeBackend(Permission.DENIED)
    SystemNotifier(backend).notify(TASK)
    assert backend.shown == []


@pytest.mark.asyncio
async def test_system_alert_auto_dismisses() -> None:
    backend = FakeBackend(Permission.GRANTED)
    focused: list[bool] = []
    notifier = SystemNotifier(backend, timeout_seconds=0.01, on_focus=lambda: focused.append(True))

    notifier.notify(TASK)

    assert len(backend.shown) == 1
    reminder, handle, on_click = backend.shown[0]
    assert reminder.tag == "task-3"
    assert on_click is not None
    assert not handle.closed

    await asyncio.sleep(0.05)
    assert handle.closed
    assert focused == []


def test_notify_send_permission_depends_on_executable() -> None:
    missing = NotifySendBackend(executable="taskbell-no-such-notifier")
    assert missing.permission() == Permission.DEFAULT
    assert missing.request_permission() == Permission.DENIED
    assert missing.permission() == Permission.DENIED

    denied = NotifySendBackend(permission=Permission.DENIED)
    assert denied.request_permission() == Permission.DENIED


def test_permission_parse() -> None:
    assert Permission.parse("GRANTED") == Permission.GRANTED
    assert Permission.parse("maybe") == Permission.DEFAULT
    assert Permission.parse(None) == Permission.DEFAULT


def test_disabled_audio_is_a_no_op() -> None:
    audio = AudioNotifier(enabled=False)
    audio.notify(TASK)
    assert audio.enabled is False


def _fake_notify_send(tmp_path: Path, output: str) -> str:
    script = tmp_path / "notify-send"
    script.write_text(f"#!/bin/sh\nprintf '{output}'\n", encoding="utf-8")
    script.chmod(0o755)
    return str(script)


async def _wait_for(predicate, timeout: float = 5.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        assert asyncio.get_running_loop().time() < deadline, "condition not reached in time"
        await asyncio.sleep(0.01)


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script")
@pytest.mark.asyncio
async def test_notify_send_click_focuses_and_dismisses(tmp_path: Path, monkeypatch) -> None:
    spawned: list[list[str]] = []
    monkeypatch.setattr(notifiers.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(notifiers, "_spawn", spawned.append)

    backend = NotifySendBackend(
        executable=_fake_notify_send(tmp_path, "42\\ndefault\\n"),
        permission=Permission.GRANTED,
    )
    clicked: list[int] = []
    handle = backend.show(build_reminder(TASK), on_click=lambda: clicked.append(1))

    await _wait_for(lambda: handle.closed)
    await _wait_for(lambda: not notifiers._background)

    assert handle.notification_id == 42
    assert clicked == [1]
    assert len(spawned) == 1
    assert "org.freedesktop.Notifications.CloseNotification" in spawned[0]
    assert spawned[0][-1] == "42"

    handle.close()
    assert len(spawned) == 1


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script")
@pytest.mark.asyncio
async def test_notify_send_without_click_keeps_alert_open(tmp_path: Path) -> None:
    backend = NotifySendBackend(executable=_fake_notify_send(tmp_path, "7\\n"), permission=Permission.GRANTED)
    handle = backend.show(build_reminder(TASK))

    await _wait_for(lambda: handle.notification_id == 7)
    await _wait_for(lambda: not notifiers._background)
    assert not handle.closed


@pytest.mark.asyncio
async def test_notify_send_failure_is_logged(tmp_path: Path, caplog) -> None:
    backend = NotifySendBackend(executable=str(tmp_path / "missing-notify-send"), permission=Permission.GRANTED)

    with caplog.at_level(logging.WARNING, logger="taskbell.reminders.notifiers"):
        handle = backend.show(build_reminder(TASK))
        await _wait_for(lambda: not notifiers._background)

    assert handle.notification_id is None
    assert any("missing-notify-send failed" in r.getMessage() for r in caplog.records)


def test_closing_an_alert_without_id_spawns_nothing(monkeypatch) -> None:
    spawned: list[list[str]] = []
    monkeypatch.setattr(notifiers, "_spawn", spawned.append)

    handle = NotifySendHandle(None)
    handle.close()

    assert handle.closed
    assert spawned == []
