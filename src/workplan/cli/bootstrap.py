# src/workplan/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (PDF extractor, plan generator, reminder store).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import ReminderNotifier
from ..core.state import AppState
from ..ingest.pdf_extractor import PdfTextExtractor
from ..llm.client import OpenRouterPlanGenerator
from ..reminders.scheduler import ReminderScheduler
from ..reminders.store import KeyValueReminderRepo, SqliteKeyValueStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.reminders_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, notifier: ReminderNotifier, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    repo = KeyValueReminderRepo(SqliteKeyValueStore(settings.reminders_db_path))
    return AppState(
        settings=settings,
        extractor=PdfTextExtractor(),
        generator=OpenRouterPlanGenerator(settings),
        scheduler=ReminderScheduler(repo, notifier),
    )
