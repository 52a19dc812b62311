# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from workplan.core.state import AppState
from workplan.plan.models import ReminderOption, Task, TaskStatus, WorkPlan
from workplan.reminders.scheduler import ReminderScheduler
from workplan.reminders.store import KeyValueReminderRepo

from .fakes import FakeExtractor, FakePlanGenerator, MemoryKeyValueStore, RecordingNotifier


def make_task(
    task_id: int,
    *,
    name: str | None = None,
    assignee: str = "Dev Team",
    start: str = "2024-01-01",
    end: str = "2024-01-05",
    status: TaskStatus = TaskStatus.NOT_STARTED,
    reminder: ReminderOption = ReminderOption.NONE,
    custom: str | None = None,
) -> Task:
    return Task(
        id=task_id,
        name=name or f"Task {task_id}",
        description=f"Description of task {task_id}",
        assignee=assignee,
        start_date=start,
        end_date=end,
        status=status,
        reminder=reminder,
        custom_reminder_date=custom,
    )


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="workplan-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        reminders_db_path=tmp_path / "data" / "reminders.sqlite3",
        openrouter_api_key=None,
        openrouter_base_url="https://example.invalid/api/v1",
        llm_models=["test/model-a", "test/model-b"],
        extra_headers={},
        llm_timeout_seconds=5.0,
        max_document_chars=1000,
    )


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def scheduler(kv: MemoryKeyValueStore, notifier: RecordingNotifier) -> ReminderScheduler:
    return ReminderScheduler(KeyValueReminderRepo(kv), notifier)


@pytest.fixture()
def plan() -> WorkPlan:
    return WorkPlan(
        project_name="Website relaunch",
        summary="Resolve open issues from the kickoff meeting.",
        tasks=[
            make_task(1, name="Audit content", assignee="Editor", start="2024-01-01", end="2024-01-05"),
            make_task(
                2,
                name="Build prototype",
                assignee="Dev Team",
                start="2024-01-03",
                end="2024-01-10",
                status=TaskStatus.IN_PROGRESS,
            ),
            make_task(
                3,
                name="Sign-off",
                assignee="Project Manager",
                start="2024-01-10",
                end="2024-01-12",
                status=TaskStatus.ON_HOLD,
            ),
        ],
    )


@pytest.fixture()
def state(settings: SimpleNamespace, scheduler: ReminderScheduler, plan: WorkPlan) -> AppState:
    """AppState wired with deterministic fakes; the plan generator returns `plan`."""
    return AppState(
        settings=settings,
        extractor=FakeExtractor(),
        generator=FakePlanGenerator(plan),
        scheduler=scheduler,
    )
