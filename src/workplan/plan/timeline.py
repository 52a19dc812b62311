# src/workplan/plan/timeline.py

from __future__ import annotations

"""
Timeline projector.

Maps task calendar dates onto chart-relative whole-day offsets so a Gantt-style
chart can stack an invisible "offset" bar and a visible "duration" bar per task.

All arithmetic is done on `datetime.date`, which is timezone-free: a day
difference is always a whole number and DST transitions cannot shift it.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from .models import Task, parse_iso_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TimelineBar:
    """One chart row: placement plus the fields the tooltip shows."""

    task_id: int
    name: str
    assignee: str
    start_date: str
    end_date: str
    offset_days: int
    duration_days: int


@dataclass(frozen=True, slots=True)
class TimelineProjection:
    bars: list[TimelineBar] = field(default_factory=list)
    domain: tuple[int, int] = (0, 0)
    project_start: date | None = None
    project_end: date | None = None

    @property
    def is_empty(self) -> bool:
        """Nothing to draw (not an error)."""
        return not self.bars

    @property
    def total_days(self) -> int:
        return self.domain[1]


def _task_span(task: Task) -> tuple[date | None, date | None]:
    start = parse_iso_date(task.start_date)
    end = parse_iso_date(task.end_date)

    if start is None and end is None:
        logger.warning("Task %s has no dates; drawing it as a 1-day bar at day 0", task.id)
        return None, None
    if start is None:
        logger.warning("Task %s has no start date; using its end date %s", task.id, end)
        return end, end
    if end is None:
        logger.warning("Task %s has no end date; using its start date %s", task.id, start)
        return start, start

    if end < start:
        logger.warning(
            "Task %s ends before it starts (start=%s end=%s); clamping duration to 1 day",
            task.id,
            start,
            end,
        )
    return start, end


def project(tasks: Iterable[Task]) -> TimelineProjection:
    """
    Project tasks onto the chart domain [0, totalDays].

    - projectStart: earliest start date
    - projectEnd: latest end date (independent of projectStart)
    - offset = start - projectStart, duration = max(1, end - start), in days

    Bars come out ordered by start date (ties keep input order).
    """
    task_list = list(tasks)
    if not task_list:
        return TimelineProjection()

    spans = [(t, *_task_span(t)) for t in task_list]
    starts = [s for _, s, _ in spans if s is not None]
    ends = [e for _, _, e in spans if e is not None]

    if not starts:
        bars = [
            TimelineBar(t.id, t.name, t.assignee, t.start_date, t.end_date, 0, 1)
            for t in task_list
        ]
        return TimelineProjection(bars=bars, domain=(0, 0))

    project_start = min(starts)
    project_end = max(ends)

    bars: list[TimelineBar] = []
    for task, start, end in sorted(spans, key=lambda x: x[1] or project_start):
        if start is None or end is None:
            offset, duration = 0, 1
        else:
            offset = (start - project_start).days
            duration = max(1, (end - start).days)
        bars.append(
            TimelineBar(
                task_id=task.id,
                name=task.name,
                assignee=task.assignee,
                start_date=task.start_date,
                end_date=task.end_date,
                offset_days=offset,
                duration_days=duration,
            )
        )

    total_days = (project_end - project_start).days
    logger.debug(
        "Timeline projected tasks=%d start=%s end=%s total_days=%d",
        len(bars),
        project_start,
        project_end,
        total_days,
    )
    return TimelineProjection(
        bars=bars,
        domain=(0, total_days),
        project_start=project_start,
        project_end=project_end,
    )
