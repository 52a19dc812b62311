# src/workplan/reminders/scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

Per task id a reminder is in one of three states:
- ABSENT:  no stored record
- PENDING: stored, notified=False
- FIRED:   stored, notified=True (terminal until the next update_reminder)

update_reminder() is driven by task edits; check_and_notify() is driven by the
application (e.g. on load). There is no background thread: both run to
completion on the caller's thread.

Storage problems never reach the caller: a reminder lost to a broken store is
better than a plan view that cannot open.
"""

import logging
import threading
from datetime import date, timedelta

from ..core.errors import MalformedReminderState
from ..core.ports import ReminderNotifier, ReminderRepo
from ..plan.models import ReminderOption, Task, format_iso_date, try_parse_iso_date, utc_today
from .models import ReminderEvent, ReminderState, StoredReminder

logger = logging.getLogger(__name__)

_DAYS_BEFORE_DUE: dict[ReminderOption, int] = {
    ReminderOption.ON_DUE_DATE: 0,
    ReminderOption.ONE_DAY_BEFORE: 1,
    ReminderOption.THREE_DAYS_BEFORE: 3,
}


def calculate_reminder_date(task: Task) -> date | None:
    """
    Concrete reminder date for a task's reminder policy, or None.

    - NONE -> None
    - CUSTOM -> custom_reminder_date (None if missing or unparsable)
    - otherwise end_date minus 0/1/3 days (None if end_date is missing or unparsable)

    Never raises.
    """
    reminder = task.reminder
    if reminder == ReminderOption.NONE:
        return None

    if reminder == ReminderOption.CUSTOM:
        return try_parse_iso_date(task.custom_reminder_date)

    days = _DAYS_BEFORE_DUE.get(reminder)
    if days is None:
        return None

    due = try_parse_iso_date(task.end_date)
    if due is None:
        logger.warning("Task %s has no usable end date %r; no reminder", task.id, task.end_date)
        return None
    return due - timedelta(days=days)


class ReminderScheduler:
    """
    Computes, persists and fires task reminders.

    The persisted collection is read, changed in memory and written back as a
    whole, so every such cycle runs under one lock.
    """

    def __init__(
        self,
        repo: ReminderRepo,
        notifier: ReminderNotifier,
        *,
        lock: threading.Lock | None = None,
    ) -> None:
        self._repo = repo
        self._notifier = notifier
        self._lock = lock or threading.Lock()

    # ---- storage (never raises) ----

    def _load(self) -> list[StoredReminder]:
        try:
            return list(self._repo.load() or [])
        except MalformedReminderState as e:
            logger.warning("Reminder state is malformed; treating as empty: %s", e)
        except Exception:
            logger.exception("Failed to load reminders; treating as empty")
        return []

    def _save(self, reminders: list[StoredReminder]) -> bool:
        try:
            self._repo.save(reminders)
            return True
        except Exception:
            logger.exception("Failed to save reminders (count=%d)", len(reminders))
            return False

    # ---- public API ----

    def update_reminder(self, task: Task) -> ReminderState:
        """
        Re-derive the reminder of `task` after an edit.

        Non-null date -> upsert a PENDING record (also resets FIRED).
        Null date -> drop any record (ABSENT).
        """
        reminder_date = calculate_reminder_date(task)

        with self._lock:
            reminders = self._load()
            idx = next((i for i, r in enumerate(reminders) if r.task_id == task.id), None)

            if reminder_date is not None:
                record = StoredReminder(
                    task_id=task.id,
                    task_name=task.name,
                    reminder_date=format_iso_date(reminder_date),
                    notified=False,
                )
                if idx is None:
                    reminders.append(record)
                else:
                    reminders[idx] = record
                self._save(reminders)
                logger.info("Reminder for task %s -> pending (%s)", task.id, record.reminder_date)
                return ReminderState.PENDING

            if idx is not None:
                del reminders[idx]
                self._save(reminders)
                logger.info("Reminder for task %s -> removed", task.id)
            return ReminderState.ABSENT

    def check_and_notify(self, today: date | None = None) -> list[ReminderEvent]:
        """
        Fire every PENDING reminder whose date is on or before `today` (UTC).

        Each fired record is persisted as notified=True in the same call, so a
        second call on the same day fires nothing new. If the notifier raises
        for a record, that record stays PENDING and is retried next time.
        """
        if today is None:
            today = utc_today()

        fired: list[ReminderEvent] = []
        with self._lock:
            reminders = self._load()

            for rem in reminders:
                if rem.notified:
                    continue

                due = try_parse_iso_date(rem.reminder_date)
                if due is None:
                    logger.warning(
                        "Stored reminder for task %s has invalid date %r; skipping",
                        rem.task_id,
                        rem.reminder_date,
                    )
                    continue
                if due > today:
                    continue

                event = ReminderEvent(
                    task_id=rem.task_id,
                    task_name=rem.task_name,
                    reminder_date=rem.reminder_date,
                )
                try:
                    self._notifier.notify(event)
                except Exception:
                    logger.exception("Reminder notifier failed task_id=%s", rem.task_id)
                    continue

                rem.notified = True
                fired.append(event)
                logger.info("Reminder for task %s -> fired (%s)", rem.task_id, rem.reminder_date)

            if fired:
                self._save(reminders)

        return fired

    def state_of(self, task_id: int) -> ReminderState:
        with self._lock:
            for rem in self._load():
                if rem.task_id == task_id:
                    return rem.state
        return ReminderState.ABSENT

    def list_reminders(self) -> list[StoredReminder]:
        with self._lock:
            return self._load()
