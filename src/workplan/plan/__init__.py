"""
Plan subsystem.

Components:
- models.py: data structures (Task, WorkPlan, TaskStatus, ReminderOption) + date helpers
- view.py: filter/sort derivation of the task list
- timeline.py: day offsets/durations for a Gantt-style chart
"""
