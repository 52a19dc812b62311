# src/workplan/reminders/store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path

from ..core.errors import MalformedReminderState
from ..core.ports import KeyValueStore
from .models import StoredReminder

logger = logging.getLogger(__name__)

REMINDERS_KEY = "workPlanTaskReminders"


class SqliteKeyValueStore:
    """
    SQLite key-value store (one row per key, value is an opaque text blob).

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "reminders.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteKeyValueStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
            conn.commit()
        finally:
            conn.close()


class KeyValueReminderRepo:
    """
    Stores the whole reminder collection as one JSON array under a single key.

    The collection is read and written wholesale; callers own the
    read-modify-write boundary (see ReminderScheduler).
    """

    def __init__(self, kv: KeyValueStore, key: str = REMINDERS_KEY) -> None:
        self._kv = kv
        self._key = key

    def load(self) -> list[StoredReminder] | None:
        raw = self._kv.get(self._key)
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedReminderState(f"Reminder blob under {self._key!r} is not JSON: {e}") from e
        if not isinstance(data, list):
            raise MalformedReminderState(
                f"Reminder blob under {self._key!r} is {type(data).__name__}, expected a list"
            )

        by_task: dict[int, StoredReminder] = {}
        for item in data:
            if not isinstance(item, dict):
                logger.warning("Skipping non-object reminder record: %r", item)
                continue
            try:
                rem = StoredReminder.from_dict(item)
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed reminder record %r: %s", item, e)
                continue
            if rem.task_id in by_task:
                # At most one record per task: the later one wins.
                logger.warning("Duplicate reminder for task_id=%s; keeping the last one", rem.task_id)
                del by_task[rem.task_id]
            by_task[rem.task_id] = rem
        return list(by_task.values())

    def save(self, reminders: list[StoredReminder]) -> None:
        blob = json.dumps([r.to_dict() for r in reminders], ensure_ascii=False)
        self._kv.set(self._key, blob)
        logger.debug("Saved %d reminders under key=%s", len(reminders), self._key)
