# src/workplan/plan/models.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from ..core.errors import PlanValidationError

logger = logging.getLogger(__name__)


def _norm(raw: str) -> str:
    return "".join(ch for ch in raw.lower() if ch.isalnum())


class TaskStatus(StrEnum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"

    @classmethod
    def lookup(cls, raw: str) -> TaskStatus:
        """Strict: "In Progress", "in_progress", "InProgress"... or ValueError."""
        key = _norm(str(raw))
        for member in cls:
            if _norm(member.value) == key or _norm(member.name) == key:
                return member
        raise ValueError(f"Unknown task status: {raw!r}")

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskStatus:
        """Lenient variant for producer payloads; unknown -> NOT_STARTED."""
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls.lookup(raw)
        except ValueError:
            logger.warning("Unknown task status %r; using %s", raw, cls.NOT_STARTED.value)
            return cls.NOT_STARTED


class ReminderOption(StrEnum):
    NONE = "None"
    ON_DUE_DATE = "On Due Date"
    ONE_DAY_BEFORE = "1 Day Before"
    THREE_DAYS_BEFORE = "3 Days Before"
    CUSTOM = "Custom"

    @classmethod
    def from_raw(cls, raw: str | None) -> ReminderOption:
        if not raw:
            return cls.NONE
        key = _norm(str(raw))
        for member in cls:
            if _norm(member.value) == key or _norm(member.name) == key:
                return member
        logger.warning("Unknown reminder option %r; using %s", raw, cls.NONE.value)
        return cls.NONE


# ---- dates ----


def parse_iso_date(raw: str | date | None) -> date | None:
    """
    Strict YYYY-MM-DD parser.

    Missing/blank -> None. Anything else that is not a calendar date raises ValueError.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    # Accept full ISO timestamps too ("2024-01-10T00:00:00Z"), keep the calendar part.
    return date.fromisoformat(s[:10])


def try_parse_iso_date(raw: str | date | None) -> date | None:
    try:
        return parse_iso_date(raw)
    except (TypeError, ValueError):
        return None


def format_iso_date(d: date) -> str:
    return d.isoformat()


def utc_today() -> date:
    return datetime.now(UTC).date()


# ---- plan ----


@dataclass(slots=True)
class Task:
    id: int
    name: str
    description: str
    assignee: str
    start_date: str
    end_date: str
    status: TaskStatus = TaskStatus.NOT_STARTED
    reminder: ReminderOption = ReminderOption.NONE
    custom_reminder_date: str | None = None

    def __post_init__(self) -> None:
        # A custom date only means something for reminder=Custom.
        if self.reminder != ReminderOption.CUSTOM:
            self.custom_reminder_date = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Task:
        """Build a Task from the camelCase wire format used by the plan generator."""
        raw_id = payload.get("id")
        if isinstance(raw_id, bool) or raw_id is None:
            raise PlanValidationError(f"Task is missing an integer id: {payload!r}")
        try:
            task_id = int(raw_id)
        except (TypeError, ValueError) as e:
            raise PlanValidationError(f"Task id is not an integer: {raw_id!r}") from e

        custom = payload.get("customReminderDate")
        return cls(
            id=task_id,
            name=str(payload.get("name") or ""),
            description=str(payload.get("description") or ""),
            assignee=str(payload.get("assignee") or ""),
            start_date=str(payload.get("startDate") or ""),
            end_date=str(payload.get("endDate") or ""),
            status=TaskStatus.from_raw(payload.get("status")),
            reminder=ReminderOption.from_raw(payload.get("reminder")),
            custom_reminder_date=str(custom) if custom else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "assignee": self.assignee,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "status": self.status.value,
            "reminder": self.reminder.value,
        }
        if self.custom_reminder_date:
            out["customReminderDate"] = self.custom_reminder_date
        return out


@dataclass(slots=True)
class WorkPlan:
    project_name: str
    summary: str
    tasks: list[Task] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[int] = set()
        for t in self.tasks:
            if t.id in seen:
                raise PlanValidationError(f"Duplicate task id {t.id} in work plan.")
            seen.add(t.id)

    @classmethod
    def from_dict(cls, payload: Any) -> WorkPlan:
        if not isinstance(payload, dict):
            raise PlanValidationError("Work plan must be a JSON object.")
        raw_tasks = payload.get("tasks")
        if not isinstance(raw_tasks, list):
            raise PlanValidationError("Generated plan is missing a valid 'tasks' array.")

        tasks: list[Task] = []
        for item in raw_tasks:
            if not isinstance(item, dict):
                raise PlanValidationError(f"Task entry is not an object: {item!r}")
            tasks.append(Task.from_dict(item))

        return cls(
            project_name=str(payload.get("projectName") or ""),
            summary=str(payload.get("summary") or ""),
            tasks=tasks,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectName": self.project_name,
            "summary": self.summary,
            "tasks": [t.to_dict() for t in self.tasks],
        }

    def get_task(self, task_id: int) -> Task:
        for t in self.tasks:
            if t.id == task_id:
                return t
        raise KeyError(task_id)

    def replace_task(self, task: Task) -> WorkPlan:
        """Return a new plan with the task of the same id swapped in (order kept)."""
        self.get_task(task.id)
        tasks = [task if t.id == task.id else t for t in self.tasks]
        return replace(self, tasks=tasks)

    def assignees(self) -> list[str]:
        """Distinct assignees in first-seen order (choices for the assignee filter)."""
        out: list[str] = []
        for t in self.tasks:
            if t.assignee not in out:
                out.append(t.assignee)
        return out
