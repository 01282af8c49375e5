# src/taskbell/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from datetime import datetime

from ..cli.commands import format_task_list, registry as command_registry
from ..core.state import AppState
from ..tasks.task_store import TaskStoreError

logger = logging.getLogger(__name__)

ReadLine = Callable[[str], Awaitable[str]]


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class StdinReader:
    """
    Reads console lines in a daemon thread and hands them to the event loop.

    input() blocks, so it runs in a daemon thread; a pending read never keeps the
    process alive. The thread only prompts after the caller asks for the next line.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._wanted = threading.Event()
        self._prompt = ""
        self._thread: threading.Thread | None = None

    def _worker(self, loop: asyncio.AbstractEventLoop) -> None:
        while True:
            self._wanted.wait()
            self._wanted.clear()
            try:
                line: str | None = input(self._prompt)
            except (EOFError, KeyboardInterrupt):
                line = None
            loop.call_soon_threadsafe(self._queue.put_nowait, line)
            if line is None:
                return

    async def __call__(self, prompt: str) -> str:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._worker,
                args=(asyncio.get_running_loop(),),
                name="stdin-reader",
                daemon=True,
            )
            self._thread.start()

        self._prompt = prompt
        self._wanted.set()
        line = await self._queue.get()
        if line is None:
            raise EOFError
        return line


def handle_line(state: AppState, line: str, emit: Callable[[str], None] = print_ts) -> str | None:
    """Process one console line: a slash command, or the text of a new task."""
    line = line.strip()
    if not line:
        return None

    try:
        reply = command_registry.handle(state, line, emit=emit)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."
    if reply is not None:
        return reply

    controller = state.controller
    controller.state.new_task = line
    try:
        task_id = controller.add_task()
    except TaskStoreError as e:
        return f"Could not save the task: {e}"
    except Exception:
        logger.exception("Adding a task crashed.")
        return "Internal error while adding a task."

    if task_id is None:
        return None
    task = controller.find(task_id)
    if task is not None and task.user_date:
        return f"Added #{task_id}: {task.text} (due {task.user_date})"
    return f"Added #{task_id}."


async def run_console_loop(
    state: AppState,
    *,
    read_line: ReadLine | None = None,
    emit: Callable[[str], None] = print_ts,
) -> None:
    read_line = read_line or StdinReader()
    logger.info("Console connector started.")
    emit("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.")
    emit(format_task_list(state.controller))

    while True:
        try:
            user_input = (await read_line(">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input, emit=emit)
        if reply is not None:
            emit(reply)

    logger.info("Console connector finished.")
