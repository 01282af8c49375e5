# src/taskbell/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs everything on one asyncio loop:
- the reminder loop as a background task,
- the console REPL in the foreground.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..cli.bootstrap import create_initial_state
from ..cli.commands import format_task_list
from ..config import get_settings
from ..connectors.console_connector import print_ts, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..reminders.reminder_loop import run_reminder_loop

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.controller.detach()
    except Exception:
        logger.debug("Controller detach failed.", exc_info=True)

    # TaskStore uses short-lived sqlite connections per call; close() only drops listeners.
    try:
        state.task_store.close()
    except Exception:
        logger.debug("TaskStore close failed.", exc_info=True)


async def run_app(state: AppState) -> None:
    state.controller.attach()

    reminders = asyncio.create_task(
        run_reminder_loop(
            state.controller,
            state.dispatcher,
            interval_seconds=state.settings.reminder_interval_seconds,
            checker=state.checker,
        ),
        name="reminder-loop",
    )
    try:
        await run_console_loop(state)
    finally:
        reminders.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reminders


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state: AppState | None = None

    def _focus() -> None:
        # A clicked system alert brings the list back into view.
        if state is not None:
            print_ts(format_task_list(state.controller))

    state = create_initial_state(settings=settings, emit=print_ts, on_focus=_focus)

    try:
        asyncio.run(run_app(state))
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received, shutting down...")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
