# src/workplan/core/session.py

"""
Session operations called by the presentation layer (CLI today).

Views and timelines are recomputed from the current plan on every call.
Task edits replace the task in the plan and then re-derive its reminder.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

from ..plan.models import ReminderOption, Task, TaskStatus, WorkPlan
from ..plan.timeline import TimelineProjection, project
from ..plan.view import SortKey, derive_view
from ..reminders.models import ReminderEvent
from .errors import PlanValidationError, WorkPlanError
from .state import AppState

logger = logging.getLogger(__name__)

_UNSET: object = object()


def _require_plan(state: AppState) -> WorkPlan:
    if state.plan is None:
        raise WorkPlanError("No work plan loaded. Use /analyze <file.pdf> or /load <plan.json>.")
    return state.plan


def _set_plan(state: AppState, plan: WorkPlan) -> list[ReminderEvent]:
    state.plan = plan
    logger.info("Work plan loaded project=%r tasks=%d", plan.project_name, len(plan.tasks))
    return state.scheduler.check_and_notify()


def analyze_document(state: AppState, document: bytes) -> WorkPlan:
    """
    Document bytes -> text -> plan, then run the due-check.

    Collaborator failures propagate as WorkPlanError; the current plan and the
    stored reminders are left untouched in that case.
    """
    logger.info("Parsing document (bytes=%d)...", len(document))
    text = state.extractor.extract(document)

    logger.info("Analyzing content and generating work plan...")
    plan = state.generator.generate(text)

    _set_plan(state, plan)
    return plan


def load_plan_file(state: AppState, path: str | Path) -> WorkPlan:
    p = Path(path)
    try:
        payload = json.loads(p.read_text("utf-8"))
    except FileNotFoundError as e:
        raise WorkPlanError(f"File not found: {p}") from e
    except json.JSONDecodeError as e:
        raise PlanValidationError(f"{p} is not valid JSON: {e.msg}") from e
    except UnicodeDecodeError as e:
        raise PlanValidationError(f"{p} is not a UTF-8 text file.") from e
    except OSError as e:
        raise WorkPlanError(f"Could not read {p}: {e.strerror or e}") from e

    plan = WorkPlan.from_dict(payload)
    _set_plan(state, plan)
    return plan


def save_plan_file(state: AppState, path: str | Path) -> Path:
    plan = _require_plan(state)
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(plan.to_dict(), ensure_ascii=False, indent=2), "utf-8")
    logger.info("Saved work plan to %s", p)
    return p


def _apply_edit(state: AppState, task: Task) -> Task:
    plan = _require_plan(state)
    state.plan = plan.replace_task(task)
    state.scheduler.update_reminder(task)
    return task


def edit_task_status(state: AppState, task_id: int, status: TaskStatus | str) -> Task:
    """Raises KeyError for an unknown task id, ValueError for an unknown status."""
    plan = _require_plan(state)
    new_status = status if isinstance(status, TaskStatus) else TaskStatus.lookup(status)
    task = replace(plan.get_task(task_id), status=new_status)
    logger.info("Task %s status -> %s", task_id, new_status.value)
    return _apply_edit(state, task)


def edit_task_reminder(
    state: AppState,
    task_id: int,
    reminder: ReminderOption | str,
    custom_date: str | None = None,
) -> Task:
    """Raises KeyError for an unknown task id."""
    plan = _require_plan(state)
    option = reminder if isinstance(reminder, ReminderOption) else ReminderOption.from_raw(reminder)
    task = replace(plan.get_task(task_id), reminder=option, custom_reminder_date=custom_date)
    logger.info("Task %s reminder -> %s %s", task_id, option.value, custom_date or "")
    return _apply_edit(state, task)


def set_view(
    state: AppState,
    *,
    sort_key: SortKey | str | object = _UNSET,
    status_filter: TaskStatus | str | object = _UNSET,
    assignee_filter: str | object = _UNSET,
) -> None:
    sel = state.selection
    if sort_key is not _UNSET:
        key = sort_key if isinstance(sort_key, SortKey) else SortKey.from_raw(str(sort_key))
        sel = replace(sel, sort_key=key)
    if status_filter is not _UNSET:
        sel = replace(sel, status_filter=status_filter)
    if assignee_filter is not _UNSET:
        sel = replace(sel, assignee_filter=assignee_filter)
    state.selection = sel


def current_view(state: AppState) -> list[Task]:
    if state.plan is None:
        return []
    sel = state.selection
    return derive_view(state.plan.tasks, sel.sort_key, sel.status_filter, sel.assignee_filter)


def current_timeline(state: AppState) -> TimelineProjection:
    if state.plan is None:
        return project([])
    return project(state.plan.tasks)
