"""
Reminder subsystem.

Components:
- models.py: StoredReminder, ReminderState, ReminderEvent
- store.py: SQLite key-value store + JSON-blob reminder repository
- scheduler.py: reminder date computation, persistence and idempotent due-check
"""
