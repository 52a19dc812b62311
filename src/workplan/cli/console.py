# src/workplan/cli/console.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from ..reminders.models import ReminderEvent
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Production notification sink: shows due reminders in the terminal."""

    def notify(self, event: ReminderEvent) -> None:
        _print_ts(f"[REMINDER] {event.message} (reminder date {event.reminder_date})")


def run_console_loop(state: AppState) -> None:
    logger.info("Console started.")
    _print_ts("[CONSOLE] Use /analyze <file.pdf> or /load <plan.json>. /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = command_registry.handle(state, user_input, emit=_print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list available commands."
        _print_ts(response)

    logger.info("Console finished.")
