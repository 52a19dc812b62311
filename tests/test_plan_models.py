# tests/test_plan_models.py

from __future__ import annotations

from datetime import date

import pytest

from workplan.core.errors import PlanValidationError
from workplan.plan.models import (
    ReminderOption,
    TaskStatus,
    WorkPlan,
    parse_iso_date,
    try_parse_iso_date,
)

from .conftest import make_task


def test_work_plan_from_wire_payload() -> None:
    plan = WorkPlan.from_dict(
        {
            "projectName": "Relaunch",
            "summary": "Do the things.",
            "tasks": [
                {
                    "id": 1,
                    "name": "Audit",
                    "description": "Audit all pages",
                    "assignee": "Editor",
                    "startDate": "2024-01-01",
                    "endDate": "2024-01-05",
                    "status": "In Progress",
                    "reminder": "3 Days Before",
                },
                {
                    "id": 2,
                    "name": "Launch",
                    "description": "",
                    "assignee": "Dev Team",
                    "startDate": "2024-01-06",
                    "endDate": "2024-01-07",
                    "status": "Not Started",
                    "reminder": "Custom",
                    "customReminderDate": "2024-01-02",
                },
            ],
        }
    )

    assert plan.project_name == "Relaunch"
    assert [t.id for t in plan.tasks] == [1, 2]
    assert plan.tasks[0].status == TaskStatus.IN_PROGRESS
    assert plan.tasks[0].reminder == ReminderOption.THREE_DAYS_BEFORE
    assert plan.tasks[1].custom_reminder_date == "2024-01-02"
    assert WorkPlan.from_dict(plan.to_dict()) == plan


def test_duplicate_task_ids_are_rejected() -> None:
    with pytest.raises(PlanValidationError):
        WorkPlan(project_name="p", summary="s", tasks=[make_task(1), make_task(1)])


def test_missing_tasks_array_is_rejected() -> None:
    with pytest.raises(PlanValidationError):
        WorkPlan.from_dict({"projectName": "p", "summary": "s"})


def test_custom_date_dropped_unless_reminder_is_custom() -> None:
    task = make_task(1, reminder=ReminderOption.ON_DUE_DATE, custom="2024-01-02")
    assert task.custom_reminder_date is None


def test_status_and_reminder_parsing_is_lenient() -> None:
    assert TaskStatus.from_raw("in_progress") == TaskStatus.IN_PROGRESS
    assert TaskStatus.from_raw("OnHold") == TaskStatus.ON_HOLD
    assert TaskStatus.from_raw("bogus") == TaskStatus.NOT_STARTED
    assert ReminderOption.from_raw("OneDayBefore") == ReminderOption.ONE_DAY_BEFORE
    assert ReminderOption.from_raw("1 day before") == ReminderOption.ONE_DAY_BEFORE
    assert ReminderOption.from_raw(None) == ReminderOption.NONE


def test_replace_task_keeps_order_and_rejects_unknown_ids(plan: WorkPlan) -> None:
    edited = make_task(2, name="Renamed")
    new_plan = plan.replace_task(edited)
    assert [t.id for t in new_plan.tasks] == [1, 2, 3]
    assert new_plan.get_task(2).name == "Renamed"
    assert plan.get_task(2).name == "Build prototype"

    with pytest.raises(KeyError):
        plan.replace_task(make_task(99))


def test_assignees_in_first_seen_order(plan: WorkPlan) -> None:
    assert plan.assignees() == ["Editor", "Dev Team", "Project Manager"]


def test_date_parsing() -> None:
    assert parse_iso_date("2024-01-10") == date(2024, 1, 10)
    assert parse_iso_date("2024-01-10T00:00:00Z") == date(2024, 1, 10)
    assert parse_iso_date("") is None
    assert parse_iso_date(None) is None
    with pytest.raises(ValueError):
        parse_iso_date("10/01/2024")
    assert try_parse_iso_date("not a date") is None
