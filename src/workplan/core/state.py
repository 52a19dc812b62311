# src/workplan/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..plan.models import WorkPlan
from ..plan.view import ViewSelection
from ..reminders.scheduler import ReminderScheduler
from .ports import DocumentExtractor, PlanGenerator


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    extractor: DocumentExtractor
    generator: PlanGenerator
    scheduler: ReminderScheduler

    # The plan lives only for the session; reminders are what persists.
    plan: WorkPlan | None = None
    selection: ViewSelection = field(default_factory=ViewSelection)
