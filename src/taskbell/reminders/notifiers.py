# src/taskbell/reminders/notifiers.py

"""
Reminder notification channels.

A reminder fans out to independent sinks:
- SystemNotifier: desktop alert through a NotificationBackend (needs permission)
- ToastNotifier: in-app line in the console, always on
- AudioNotifier: short beep, best-effort (optional sounddevice/numpy)

NotificationDispatcher calls every sink and isolates failures, so a crash or a
denied permission in one channel never blocks the others.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from ..core.ports import Notifier
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

REMINDER_TITLE = "⏰ Task Reminder!"


class Permission(StrEnum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"

    @classmethod
    def parse(cls, raw: str | None) -> Permission:
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.DEFAULT


@dataclass(slots=True, frozen=True)
class Reminder:
    """What a channel shows for one due task."""

    title: str
    body: str
    tag: str
    require_interaction: bool = True


def build_reminder(task: Task) -> Reminder:
    return Reminder(
        title=REMINDER_TITLE,
        body=f"It's time for: {task.text}",
        tag=f"task-{task.id}",
    )


# --------------------------------------------------------------------------------------
# System notifications
# --------------------------------------------------------------------------------------


class AlertHandle(Protocol):
    def close(self) -> None: ...


class NotificationBackend(Protocol):
    def permission(self) -> Permission: ...
    def request_permission(self) -> Permission: ...

    def show(self, reminder: Reminder, *, on_click: Callable[[], None] | None = None) -> AlertHandle: ...


class NotifySendHandle:
    """A shown freedesktop notification; close() withdraws it from the screen."""

    def __init__(self, notification_id: int | None) -> None:
        self.notification_id = notification_id
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.notification_id is None or shutil.which("gdbus") is None:
            return
        _spawn(
            [
                "gdbus",
                "call",
                "--session",
                "--dest",
                "org.freedesktop.Notifications",
                "--object-path",
                "/org/freedesktop/Notifications",
                "--method",
                "org.freedesktop.Notifications.CloseNotification",
                str(self.notification_id),
            ]
        )


_background: set[asyncio.Task[None]] = set()


def _track(task: asyncio.Task[None], what: str) -> None:
    """Hold a reference to a background task until it ends and log its failure."""
    _background.add(task)

    def _done(t: asyncio.Task[None]) -> None:
        _background.discard(t)
        if t.cancelled():
            return
        exc = t.exception()
        if exc is not None:
            logger.warning("%s failed: %r", what, exc)

    task.add_done_callback(_done)


def _spawn(argv: list[str]) -> None:
    """Fire-and-forget subprocess on the running loop, or in a thread without one."""

    async def _run() -> None:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        await proc.wait()

    def _run_detached() -> None:
        try:
            asyncio.run(_run())
        except Exception as e:
            logger.warning("%s failed: %r", argv[0], e)

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        threading.Thread(target=_run_detached, daemon=True).start()
        return
    _track(loop.create_task(_run()), argv[0])


class NotifySendBackend:
    """
    Desktop notifications via the freedesktop `notify-send` tool.

    Permission is "granted" when the tool is installed, "denied" otherwise.
    Clicks are reported through `notify-send --wait --action`, which prints the
    activated action name once the user interacts with the alert.
    """

    def __init__(
        self,
        executable: str = "notify-send",
        app_name: str = "taskbell",
        permission: Permission = Permission.DEFAULT,
    ) -> None:
        self.executable = executable
        self.app_name = app_name
        self._permission = permission

    def permission(self) -> Permission:
        return self._permission

    def request_permission(self) -> Permission:
        if self._permission == Permission.DEFAULT:
            found = shutil.which(self.executable) is not None
            self._permission = Permission.GRANTED if found else Permission.DENIED
            logger.info("System notification permission: %s", self._permission.value)
        return self._permission

    def show(self, reminder: Reminder, *, on_click: Callable[[], None] | None = None) -> AlertHandle:
        handle = NotifySendHandle(None)
        argv = [
            self.executable,
            "--app-name",
            self.app_name,
            "--print-id",
            f"--hint=string:x-canonical-private-synchronous:{reminder.tag}",
        ]
        if reminder.require_interaction:
            argv.append("--urgency=critical")
        if on_click is not None:
            argv += ["--wait", "--action=default=Open"]
        argv += [reminder.title, reminder.body]

        async def _run() -> None:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
            if proc.stdout is None:
                raise RuntimeError("notify-send stdout was not captured")
            first = await proc.stdout.readline()
            with contextlib.suppress(ValueError):
                handle.notification_id = int(first.strip())
            rest = (await proc.stdout.read()).decode("utf-8", "replace").split()
            await proc.wait()
            if on_click is not None and "default" in rest and not handle.closed:
                on_click()
                handle.close()

        _track(asyncio.get_running_loop().create_task(_run()), self.executable)
        return handle


class SystemNotifier:
    """
    System alert channel.

    Only shows alerts while permission is granted; a denied permission silently
    disables this channel and nothing else. Alerts are withdrawn after
    `timeout_seconds`; clicking one calls `on_focus` and dismisses it.
    """

    name = "system"

    def __init__(
        self,
        backend: NotificationBackend,
        *,
        timeout_seconds: float = 10.0,
        on_focus: Callable[[], None] | None = None,
    ) -> None:
        self.backend = backend
        self.timeout_seconds = float(timeout_seconds)
        self.on_focus = on_focus

    def notify(self, task: Task) -> None:
        if self.backend.permission() != Permission.GRANTED:
            logger.debug("System notification skipped task_id=%s (permission not granted)", task.id)
            return

        handle = self.backend.show(build_reminder(task), on_click=self.on_focus)
        if self.timeout_seconds > 0:
            asyncio.get_running_loop().call_later(self.timeout_seconds, handle.close)


# --------------------------------------------------------------------------------------
# In-app toast + audio
# --------------------------------------------------------------------------------------


class ToastNotifier:
    """In-app channel: hands a one-line message to the UI."""

    name = "toast"

    def __init__(self, emit: Callable[[str], None]) -> None:
        self.emit = emit

    def notify(self, task: Task) -> None:
        r = build_reminder(task)
        self.emit(f"{r.title} {r.body}")


class AudioNotifier:
    """
    Best-effort audio cue.

    sounddevice/numpy are imported lazily; if they are missing or no output device
    is available, the channel disables itself after logging a warning.
    """

    name = "audio"

    def __init__(
        self,
        enabled: bool = True,
        *,
        frequency_hz: float = 880.0,
        duration_seconds: float = 0.35,
        sample_rate: int = 44100,
        volume: float = 0.3,
    ) -> None:
        self.enabled = bool(enabled)
        self.frequency_hz = frequency_hz
        self.duration_seconds = duration_seconds
        self.sample_rate = sample_rate
        self.volume = volume
        self._sd: Any = None
        self._tone: Any = None

    def _ensure_ready(self) -> bool:
        if not self.enabled:
            return False
        if self._sd is not None:
            return True
        try:
            import numpy as np
            import sounddevice as sd
        except Exception as e:
            self.enabled = False
            logger.warning("Audio cue disabled: sounddevice/numpy unavailable (%r).", e)
            return False

        t = np.linspace(0.0, self.duration_seconds, int(self.sample_rate * self.duration_seconds), False)
        fade = np.minimum(1.0, np.minimum(t, self.duration_seconds - t) * 40.0)
        self._tone = (np.sin(2.0 * np.pi * self.frequency_hz * t) * fade * self.volume).astype(np.float32)
        self._sd = sd
        return True

    def notify(self, task: Task) -> None:
        if not self._ensure_ready():
            return
        try:
            # Non-blocking: playback runs in PortAudio's callback thread.
            self._sd.play(self._tone, self.sample_rate)
        except Exception as e:
            logger.warning("Audio cue playback failed: %r", e)


# --------------------------------------------------------------------------------------
# Fan-out
# --------------------------------------------------------------------------------------


class NotificationDispatcher:
    """Send one reminder to every channel; a failing channel never blocks the rest."""

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self.notifiers: list[Notifier] = list(notifiers)

    def dispatch(self, task: Task) -> list[str]:
        """Returns the names of the channels that failed."""
        failed: list[str] = []
        for n in self.notifiers:
            name = getattr(n, "name", type(n).__name__)
            try:
                n.notify(task)
            except Exception:
                logger.exception("Notification channel failed channel=%s task_id=%s", name, task.id)
                failed.append(name)
        return failed
