# src/workplan/reminders/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ReminderState(StrEnum):
    ABSENT = "absent"  # no stored record
    PENDING = "pending"  # stored, notified=False
    FIRED = "fired"  # stored, notified=True


@dataclass(slots=True)
class StoredReminder:
    """
    Persisted reminder record.

    task_name is a snapshot so a reminder can be shown without the live plan.
    """

    task_id: int
    task_name: str
    reminder_date: str  # YYYY-MM-DD
    notified: bool = False

    @property
    def state(self) -> ReminderState:
        return ReminderState.FIRED if self.notified else ReminderState.PENDING

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> StoredReminder:
        task_id = raw["taskId"]
        if isinstance(task_id, bool) or not isinstance(task_id, int):
            raise ValueError(f"taskId must be an integer, got {task_id!r}")
        reminder_date = raw["reminderDate"]
        if not isinstance(reminder_date, str) or not reminder_date.strip():
            raise ValueError(f"reminderDate must be a date string, got {reminder_date!r}")
        notified = raw.get("notified", False)
        if not isinstance(notified, bool):
            raise ValueError(f"notified must be a boolean, got {notified!r}")
        return cls(
            task_id=task_id,
            task_name=str(raw.get("taskName") or ""),
            reminder_date=reminder_date.strip(),
            notified=notified,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "taskId": self.task_id,
            "taskName": self.task_name,
            "reminderDate": self.reminder_date,
            "notified": self.notified,
        }


@dataclass(slots=True, frozen=True)
class ReminderEvent:
    """What the scheduler hands to the notification sink for one due reminder."""

    task_id: int
    task_name: str
    reminder_date: str

    @property
    def message(self) -> str:
        return f'Reminder: Task "{self.task_name}" is due soon!'
