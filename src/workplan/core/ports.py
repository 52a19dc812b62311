# src/workplan/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage, document parsing and plan generation swappable and makes testing easier.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..plan.models import WorkPlan
    from ..reminders.models import ReminderEvent, StoredReminder


class DocumentExtractor(Protocol):
    """Turns raw document bytes (e.g. a PDF upload) into plain text."""

    def extract(self, document: bytes) -> str: ...


class PlanGenerator(Protocol):
    """
    Turns document text into a WorkPlan.

    Either returns a well-formed plan or raises PlanGenerationError with a
    message fit for the end user. Retry/rate-limit behavior is the adapter's business.
    """

    def generate(self, text: str) -> WorkPlan: ...


class ReminderNotifier(Protocol):
    """Notification sink: receives one event per due reminder."""

    def notify(self, event: ReminderEvent) -> None: ...


class KeyValueStore(Protocol):
    """Blob persistence keyed by string (absent key -> None)."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class ReminderRepo(Protocol):
    # load() returns None when nothing was ever stored.
    def load(self) -> list[StoredReminder] | None: ...
    def save(self, reminders: list[StoredReminder]) -> None: ...
