# src/workplan/plan/view.py

from __future__ import annotations

"""
View engine.

Derives the task list a user is looking at from the plan plus a filter/sort
selection. Pure and recomputed on every call: there is no cache to invalidate.

Order of operations:
- filter by status and assignee (conjunction, "All" disables a filter),
- then a stable sort of the filtered tasks by the selected key.
"""

import locale
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from .models import Task, TaskStatus, parse_iso_date

ALL = "All"

STATUS_PRIORITY: dict[TaskStatus, int] = {
    TaskStatus.IN_PROGRESS: 1,
    TaskStatus.ON_HOLD: 2,
    TaskStatus.NOT_STARTED: 3,
    TaskStatus.COMPLETED: 4,
}


class SortKey(StrEnum):
    DEFAULT = "default"
    END_DATE = "endDate"
    STATUS = "status"
    ASSIGNEE = "assignee"

    @classmethod
    def from_raw(cls, raw: str | None) -> SortKey:
        """Lenient lookup ("end_date", "EndDate", "enddate" all map to END_DATE)."""
        key = "".join(ch for ch in (raw or "").lower() if ch.isalnum())
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown sort key: {raw!r}")


def _end_date_key(task: Task) -> tuple[int, date]:
    # Undated tasks go last; malformed strings raise (caller bug, not data noise).
    d = parse_iso_date(task.end_date)
    if d is None:
        return (1, date.max)
    return (0, d)


def _assignee_key(task: Task) -> tuple[str, str]:
    # Case-insensitive first, so "bob" sits between "Alice" and "Carol" even in C.UTF-8.
    name = task.assignee or ""
    return (locale.strxfrm(name.casefold()), locale.strxfrm(name))


def _sort_key_func(sort_key: SortKey):
    if sort_key == SortKey.END_DATE:
        return _end_date_key
    if sort_key == SortKey.STATUS:
        return lambda t: STATUS_PRIORITY.get(t.status, len(STATUS_PRIORITY) + 1)
    if sort_key == SortKey.ASSIGNEE:
        return _assignee_key
    return lambda t: t.id


def _normalize_status_filter(status_filter: TaskStatus | str | None) -> TaskStatus | None:
    if status_filter is None or status_filter == ALL:
        return None
    if isinstance(status_filter, TaskStatus):
        return status_filter
    # Unknown names raise instead of silently matching another status.
    return TaskStatus.lookup(status_filter)


def derive_view(
    tasks: Iterable[Task],
    sort_key: SortKey | str = SortKey.DEFAULT,
    status_filter: TaskStatus | str | None = ALL,
    assignee_filter: str | None = ALL,
) -> list[Task]:
    """
    Filter then sort.

    Sorting relies on `sorted` being stable: tasks with equal keys keep the
    relative order they had after filtering.
    """
    key = sort_key if isinstance(sort_key, SortKey) else SortKey.from_raw(sort_key)
    wanted_status = _normalize_status_filter(status_filter)
    wanted_assignee = None if assignee_filter in (None, ALL) else assignee_filter

    filtered = [
        t
        for t in tasks
        if (wanted_status is None or t.status == wanted_status)
        and (wanted_assignee is None or t.assignee == wanted_assignee)
    ]
    return sorted(filtered, key=_sort_key_func(key))


@dataclass(frozen=True, slots=True)
class ViewSelection:
    sort_key: SortKey = SortKey.DEFAULT
    status_filter: TaskStatus | str = ALL
    assignee_filter: str = ALL

    def apply(self, tasks: Iterable[Task]) -> list[Task]:
        return derive_view(tasks, self.sort_key, self.status_filter, self.assignee_filter)


def sort_key_options() -> list[str]:
    return [k.value for k in SortKey]


def status_filter_options() -> list[str]:
    return [ALL, *(s.value for s in TaskStatus)]
