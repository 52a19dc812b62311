# src/workplan/core/errors.py

from __future__ import annotations


class WorkPlanError(Exception):
    """Base class for user-visible failures (message is safe to show)."""


class ExtractionError(WorkPlanError):
    """The document could not be turned into text."""


class PlanGenerationError(WorkPlanError):
    """The plan generation service failed or returned an unusable plan."""


class PlanValidationError(WorkPlanError):
    """A plan payload does not satisfy the WorkPlan invariants (e.g. duplicate ids)."""


class MalformedReminderState(Exception):
    """The persisted reminder collection could not be decoded."""
