# src/workplan/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import cast

from ..core import session
from ..core.errors import WorkPlanError
from ..core.state import AppState
from ..plan.models import ReminderOption, TaskStatus, parse_iso_date
from ..plan.view import ALL, SortKey, sort_key_options, status_filter_options

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /view, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                return cast(CommandHandler3, handler)(state, args, emit)
            return cast(CommandHandler2, handler)(state, args)
        except WorkPlanError as e:
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_task_id(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


def _format_tasks(state: AppState) -> str:
    tasks = session.current_view(state)
    sel = state.selection
    header = (
        f"Tasks (sort={sel.sort_key.value}, status={sel.status_filter}, "
        f"assignee={sel.assignee_filter}): {len(tasks)}"
    )
    if not tasks:
        return header + "\n  (no tasks match)"
    lines = [header]
    for t in tasks:
        reminder = t.reminder.value
        if t.reminder == ReminderOption.CUSTOM and t.custom_reminder_date:
            reminder = f"{reminder} {t.custom_reminder_date}"
        lines.append(
            f"  #{t.id} {t.name} | {t.assignee} | {t.start_date} -> {t.end_date} "
            f"| {t.status.value} | reminder: {reminder}"
        )
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    models = ", ".join(list(getattr(state.settings, "llm_models", []) or []))
    plan = state.plan
    plan_line = f"{plan.project_name} ({len(plan.tasks)} tasks)" if plan else "none"
    return (
        "Status:\n"
        f"  Plan: {plan_line}\n"
        f"  Stored reminders: {len(state.scheduler.list_reminders())}\n"
        f"  Models (priority -> fallback): {models}"
    )


def cmd_analyze(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/analyze <file.pdf>"""
    if not args:
        return "Usage: /analyze <file.pdf>"
    path = Path(" ".join(args)).expanduser()
    if not path.is_file() or path.suffix.lower() != ".pdf":
        return "Please select a valid PDF file."

    if emit:
        emit("Parsing PDF document and generating work plan (may take a while)...")
    plan = session.analyze_document(state, path.read_bytes())
    return f"Work plan ready: {plan.project_name}\n{plan.summary}\n\n{_format_tasks(state)}"


def cmd_load(state: AppState, args: list[str]) -> str:
    """/load <plan.json>"""
    if not args:
        return "Usage: /load <plan.json>"
    plan = session.load_plan_file(state, Path(" ".join(args)).expanduser())
    return f"Loaded: {plan.project_name} ({len(plan.tasks)} tasks)"


def cmd_save(state: AppState, args: list[str]) -> str:
    """/save <plan.json>"""
    if not args:
        return "Usage: /save <plan.json>"
    path = session.save_plan_file(state, Path(" ".join(args)).expanduser())
    return f"Saved plan to {path}"


def cmd_view(state: AppState, args: list[str]) -> str:
    if state.plan is None:
        return "No work plan loaded. Use /analyze <file.pdf> or /load <plan.json>."
    return _format_tasks(state)


def cmd_sort(state: AppState, args: list[str]) -> str:
    """/sort default | endDate | status | assignee"""
    if not args:
        return "Usage: /sort " + " | ".join(sort_key_options())
    try:
        key = SortKey.from_raw(args[0])
    except ValueError:
        return f"Unknown sort key. Use one of: {', '.join(sort_key_options())}"
    session.set_view(state, sort_key=key)
    return cmd_view(state, [])


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter status <status|All>
    /filter assignee <name|All>
    /filter clear
    """
    if args and args[0].lower() == "clear":
        session.set_view(state, status_filter=ALL, assignee_filter=ALL)
        return cmd_view(state, [])

    if len(args) < 2:
        assignees = state.plan.assignees() if state.plan else []
        return (
            "Usage:\n"
            f"  /filter status <{' | '.join(status_filter_options())}>\n"
            f"  /filter assignee <{' | '.join([ALL, *assignees])}>\n"
            "  /filter clear"
        )

    what = args[0].lower()
    value = " ".join(args[1:])
    if what == "status":
        try:
            status = ALL if value.lower() == ALL.lower() else TaskStatus.lookup(value)
        except ValueError:
            return f"Unknown status. Use one of: {', '.join(status_filter_options())}"
        session.set_view(state, status_filter=status)
    elif what == "assignee":
        session.set_view(state, assignee_filter=ALL if value.lower() == ALL.lower() else value)
    else:
        return "Usage: /filter status <value> | /filter assignee <value> | /filter clear"
    return cmd_view(state, [])


def cmd_timeline(state: AppState, args: list[str]) -> str:
    tl = session.current_timeline(state)
    if tl.is_empty:
        return "No tasks to display in timeline."
    lines = [f"Timeline {tl.project_start} -> {tl.project_end} (Day 0 .. Day {tl.total_days})"]
    for bar in tl.bars:
        lines.append(
            f"  {bar.name[:30]:<30} {' ' * bar.offset_days}{'#' * bar.duration_days} "
            f"(day {bar.offset_days}, {bar.duration_days}d, {bar.assignee})"
        )
    return "\n".join(lines)


def cmd_set_status(state: AppState, args: list[str]) -> str:
    """/set-status <id> <status>"""
    if len(args) < 2 or _parse_task_id(args[0]) is None:
        return "Usage: /set-status <id> <" + " | ".join(s.value for s in TaskStatus) + ">"
    task_id = cast(int, _parse_task_id(args[0]))
    try:
        task = session.edit_task_status(state, task_id, " ".join(args[1:]))
    except KeyError:
        return f"No task with id {task_id}."
    except ValueError:
        return "Unknown status. Use one of: " + ", ".join(s.value for s in TaskStatus)
    return f"Task #{task.id} is now {task.status.value}."


def cmd_remind(state: AppState, args: list[str]) -> str:
    """/remind <id> <None|OnDueDate|1DayBefore|3DaysBefore|Custom> [YYYY-MM-DD]"""
    usage = "Usage: /remind <id> <" + " | ".join(o.value for o in ReminderOption) + "> [YYYY-MM-DD]"
    if len(args) < 2 or _parse_task_id(args[0]) is None:
        return usage
    task_id = cast(int, _parse_task_id(args[0]))

    custom_date: str | None = None
    rest = args[1:]
    if rest and len(rest) > 1:
        try:
            if parse_iso_date(rest[-1]) is not None:
                custom_date = rest[-1]
                rest = rest[:-1]
        except ValueError:
            pass

    option = ReminderOption.from_raw(" ".join(rest))
    if option == ReminderOption.CUSTOM and custom_date is None:
        return "Custom reminders need a date: /remind <id> Custom YYYY-MM-DD"

    try:
        task = session.edit_task_reminder(state, task_id, option, custom_date)
    except KeyError:
        return f"No task with id {task_id}."
    reminder_state = state.scheduler.state_of(task.id)
    return f"Task #{task.id} reminder: {task.reminder.value} ({reminder_state.value})."


def cmd_reminders(state: AppState, args: list[str]) -> str:
    reminders = state.scheduler.list_reminders()
    if not reminders:
        return "No reminders stored."
    lines = ["Stored reminders:"]
    for r in sorted(reminders, key=lambda x: (x.reminder_date, x.task_id)):
        lines.append(f"  #{r.task_id} {r.task_name} on {r.reminder_date} [{r.state.value}]")
    return "\n".join(lines)


def cmd_check(state: AppState, args: list[str]) -> str:
    """/check [YYYY-MM-DD]"""
    today = None
    if args:
        try:
            today = parse_iso_date(args[0])
        except ValueError:
            return "Usage: /check [YYYY-MM-DD]"
    fired = state.scheduler.check_and_notify(today)
    return f"Due reminders fired: {len(fired)}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show the loaded plan, reminder count and models.")
registry.register("analyze", cmd_analyze, help_text="Generate a plan from a PDF: /analyze <file.pdf>.")
registry.register("load", cmd_load, help_text="Load a plan from JSON: /load <plan.json>.")
registry.register("save", cmd_save, help_text="Save the current plan as JSON: /save <plan.json>.")
registry.register("view", cmd_view, help_text="Show the filtered/sorted task list.", aliases=["ls"])
registry.register("sort", cmd_sort, help_text="Sort tasks: /sort default | endDate | status | assignee.")
registry.register("filter", cmd_filter, help_text="Filter tasks: /filter status|assignee <value|All>.")
registry.register("timeline", cmd_timeline, help_text="Show the Gantt-style timeline.", aliases=["gantt"])
registry.register("set-status", cmd_set_status, help_text="Change a task status: /set-status <id> <status>.")
registry.register("remind", cmd_remind, help_text="Set a task reminder: /remind <id> <option> [date].")
registry.register("reminders", cmd_reminders, help_text="List stored reminders.")
registry.register("check", cmd_check, help_text="Fire due reminders: /check [YYYY-MM-DD].")
