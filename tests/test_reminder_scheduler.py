# tests/test_reminder_scheduler.py

from __future__ import annotations

import json
from datetime import date

import pytest

from workplan.plan.models import ReminderOption
from workplan.reminders.models import ReminderState, StoredReminder
from workplan.reminders.scheduler import ReminderScheduler, calculate_reminder_date
from workplan.reminders.store import REMINDERS_KEY, KeyValueReminderRepo

from .conftest import make_task
from .fakes import BrokenKeyValueStore, MemoryKeyValueStore, RecordingNotifier


def _stored(kv: MemoryKeyValueStore) -> list[dict]:
    return json.loads(kv.data[REMINDERS_KEY])


@pytest.mark.parametrize(
    ("option", "expected"),
    [
        (ReminderOption.NONE, None),
        (ReminderOption.ON_DUE_DATE, date(2024, 1, 10)),
        (ReminderOption.ONE_DAY_BEFORE, date(2024, 1, 9)),
        (ReminderOption.THREE_DAYS_BEFORE, date(2024, 1, 7)),
    ],
)
def test_calculate_reminder_date_from_end_date(option: ReminderOption, expected: date | None) -> None:
    task = make_task(1, end="2024-01-10", reminder=option)
    assert calculate_reminder_date(task) == expected


def test_calculate_reminder_date_crosses_month_boundary() -> None:
    task = make_task(1, end="2024-03-01", reminder=ReminderOption.THREE_DAYS_BEFORE)
    assert calculate_reminder_date(task) == date(2024, 2, 27)


def test_calculate_custom_reminder_date() -> None:
    assert calculate_reminder_date(
        make_task(1, reminder=ReminderOption.CUSTOM, custom="2024-02-02")
    ) == date(2024, 2, 2)
    assert calculate_reminder_date(make_task(1, reminder=ReminderOption.CUSTOM)) is None
    assert calculate_reminder_date(make_task(1, reminder=ReminderOption.CUSTOM, custom="someday")) is None


def test_calculate_reminder_date_never_raises_on_bad_end_date() -> None:
    assert calculate_reminder_date(make_task(1, end="", reminder=ReminderOption.ON_DUE_DATE)) is None
    assert calculate_reminder_date(make_task(1, end="2024-13-45", reminder=ReminderOption.ON_DUE_DATE)) is None


def test_update_reminder_upserts_one_pending_record(
    scheduler: ReminderScheduler, kv: MemoryKeyValueStore
) -> None:
    task = make_task(4, name="Ship", end="2024-01-10", reminder=ReminderOption.THREE_DAYS_BEFORE)
    assert scheduler.update_reminder(task) == ReminderState.PENDING
    assert _stored(kv) == [
        {"taskId": 4, "taskName": "Ship", "reminderDate": "2024-01-07", "notified": False}
    ]

    moved = make_task(4, name="Ship", end="2024-01-20", reminder=ReminderOption.ON_DUE_DATE)
    scheduler.update_reminder(moved)
    records = _stored(kv)
    assert len(records) == 1
    assert records[0]["reminderDate"] == "2024-01-20"


def test_update_reminder_round_trip_matches_calculation(scheduler: ReminderScheduler) -> None:
    for option in ReminderOption:
        task = make_task(1, end="2024-05-05", reminder=option, custom="2024-05-01")
        scheduler.update_reminder(task)
        stored = {r.task_id: r for r in scheduler.list_reminders()}
        expected = calculate_reminder_date(task)
        if expected is None:
            assert 1 not in stored
        else:
            assert stored[1].reminder_date == expected.isoformat()


def test_update_reminder_to_none_removes_record(
    scheduler: ReminderScheduler, kv: MemoryKeyValueStore
) -> None:
    scheduler.update_reminder(make_task(1, reminder=ReminderOption.ON_DUE_DATE))
    scheduler.update_reminder(make_task(2, reminder=ReminderOption.ON_DUE_DATE))

    assert scheduler.update_reminder(make_task(1, reminder=ReminderOption.NONE)) == ReminderState.ABSENT
    assert [r["taskId"] for r in _stored(kv)] == [2]
    assert scheduler.state_of(1) == ReminderState.ABSENT


def test_update_reminder_without_record_and_without_date_does_not_write(
    scheduler: ReminderScheduler, kv: MemoryKeyValueStore
) -> None:
    scheduler.update_reminder(make_task(1, reminder=ReminderOption.NONE))
    assert kv.writes == 0


def test_check_and_notify_fires_due_reminder_once(
    kv: MemoryKeyValueStore, notifier: RecordingNotifier, scheduler: ReminderScheduler
) -> None:
    kv.set(
        REMINDERS_KEY,
        json.dumps([{"taskId": 1, "taskName": "Ship", "reminderDate": "2024-01-07", "notified": False}]),
    )

    fired = scheduler.check_and_notify(date(2024, 1, 8))
    assert [e.task_id for e in fired] == [1]
    assert notifier.events[0].message == 'Reminder: Task "Ship" is due soon!'
    assert _stored(kv)[0]["notified"] is True
    assert scheduler.state_of(1) == ReminderState.FIRED

    assert scheduler.check_and_notify(date(2024, 1, 9)) == []
    assert len(notifier.events) == 1


def test_check_and_notify_twice_same_day_is_idempotent(
    scheduler: ReminderScheduler, notifier: RecordingNotifier
) -> None:
    for i in range(1, 4):
        scheduler.update_reminder(make_task(i, end="2024-01-10", reminder=ReminderOption.ON_DUE_DATE))

    today = date(2024, 1, 10)
    first = scheduler.check_and_notify(today)
    second = scheduler.check_and_notify(today)
    assert len(first) == 3
    assert second == []
    assert sorted(e.task_id for e in notifier.events) == [1, 2, 3]


def test_check_and_notify_leaves_future_reminders_pending(
    scheduler: ReminderScheduler, kv: MemoryKeyValueStore
) -> None:
    scheduler.update_reminder(make_task(1, end="2024-01-10", reminder=ReminderOption.ON_DUE_DATE))
    writes_before = kv.writes

    assert scheduler.check_and_notify(date(2024, 1, 9)) == []
    assert scheduler.state_of(1) == ReminderState.PENDING
    assert kv.writes == writes_before


def test_update_after_fired_returns_to_pending(
    scheduler: ReminderScheduler, notifier: RecordingNotifier
) -> None:
    task = make_task(1, end="2024-01-10", reminder=ReminderOption.ON_DUE_DATE)
    scheduler.update_reminder(task)
    scheduler.check_and_notify(date(2024, 1, 10))
    assert scheduler.state_of(1) == ReminderState.FIRED

    scheduler.update_reminder(task)
    assert scheduler.state_of(1) == ReminderState.PENDING
    scheduler.check_and_notify(date(2024, 1, 10))
    assert len(notifier.events) == 2


def test_malformed_state_is_treated_as_empty(
    kv: MemoryKeyValueStore, scheduler: ReminderScheduler, notifier: RecordingNotifier
) -> None:
    kv.set(REMINDERS_KEY, "{not json")
    assert scheduler.check_and_notify(date(2024, 1, 1)) == []
    assert scheduler.list_reminders() == []

    # The next update overwrites the broken blob with a valid collection.
    scheduler.update_reminder(make_task(1, reminder=ReminderOption.ON_DUE_DATE))
    assert [r["taskId"] for r in _stored(kv)] == [1]


def test_storage_failures_never_reach_the_caller(notifier: RecordingNotifier) -> None:
    scheduler = ReminderScheduler(KeyValueReminderRepo(BrokenKeyValueStore()), notifier)
    task = make_task(1, reminder=ReminderOption.ON_DUE_DATE)

    assert scheduler.update_reminder(task) == ReminderState.PENDING
    assert scheduler.check_and_notify(date(2024, 1, 1)) == []
    assert scheduler.state_of(1) == ReminderState.ABSENT


def test_notifier_failure_keeps_record_pending(kv: MemoryKeyValueStore) -> None:
    class FlakyNotifier:
        def __init__(self) -> None:
            self.calls = 0

        def notify(self, event) -> None:
            self.calls += 1
            if event.task_id == 1:
                raise RuntimeError("dialog closed")

    flaky = FlakyNotifier()
    scheduler = ReminderScheduler(KeyValueReminderRepo(kv), flaky)
    scheduler.update_reminder(make_task(1, end="2024-01-05", reminder=ReminderOption.ON_DUE_DATE))
    scheduler.update_reminder(make_task(2, end="2024-01-05", reminder=ReminderOption.ON_DUE_DATE))

    fired = scheduler.check_and_notify(date(2024, 1, 5))
    assert [e.task_id for e in fired] == [2]
    assert scheduler.state_of(1) == ReminderState.PENDING
    assert scheduler.state_of(2) == ReminderState.FIRED


def test_stored_reminder_state_property() -> None:
    rem = StoredReminder(task_id=1, task_name="x", reminder_date="2024-01-01")
    assert rem.state == ReminderState.PENDING
    rem.notified = True
    assert rem.state == ReminderState.FIRED
    assert rem.state == "fired"
