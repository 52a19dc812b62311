# src/workplan/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, fires reminders that became due since
the last run, then starts the console REPL. An optional positional argument
(a .pdf to analyze or a .json plan to load) is processed before the REPL.
"""

from __future__ import annotations

import argparse
import contextlib
import locale
import logging

from ..config import get_settings
from ..core.errors import WorkPlanError
from ..core.session import analyze_document, load_plan_file
from ..logging_setup import level_from_name, setup_logging
from .bootstrap import create_initial_state
from .console import ConsoleNotifier, run_console_loop

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="workplan",
        description="Turn a PDF into a work plan with views, a timeline and task reminders.",
    )
    parser.add_argument("document", nargs="?", help="PDF to analyze or plan JSON to load.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Assignee sorting collates with the user's locale.
    with contextlib.suppress(locale.Error):
        locale.setlocale(locale.LC_COLLATE, "")
    settings = get_settings()

    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(getattr(settings, "log_level", "INFO")),
    )
    logger.info("Starting %s (log file %s)...", settings.app_name, log_file)

    state = create_initial_state(notifier=ConsoleNotifier(), settings=settings)
    state.scheduler.check_and_notify()

    if args.document:
        try:
            if args.document.lower().endswith(".json"):
                load_plan_file(state, args.document)
            else:
                with open(args.document, "rb") as fh:
                    analyze_document(state, fh.read())
        except (OSError, WorkPlanError) as e:
            logger.info("Initial document failed: %s", e)
            print(f"Error: {e}")

    run_console_loop(state)
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
