from __future__ import annotations

import json
import os
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from packages.core.schedule.errors import EventNotFoundError
from packages.core.schedule.models import BaseItem, ExternalTask, RecurrenceRule
from packages.core.schedule.times import parse_instant, to_iso

from .base import BaseItemStore, TaskStore


_EVENT_COLUMNS = (
    "id, owner_id, title, description, start_iso, end_iso, all_day, kind, "
    "color, location, recurrence, created_at, updated_at"
)

_TASK_COLUMNS = (
    "id, title, description, status, priority, due_date, assignee_ids, "
    "created_at, updated_at"
)

# Maps BaseItem field names to event columns.
_PATCHABLE = {
    "title": "title",
    "description": "description",
    "start": "start_iso",
    "end": "end_iso",
    "all_day": "all_day",
    "kind": "kind",
    "color": "color",
    "location": "location",
    "recurrence": "recurrence",
    "updated_at": "updated_at",
}


def _recurrence_json(rule: Optional[RecurrenceRule]) -> Optional[str]:
    return json.dumps(rule.to_dict()) if rule else None


def _column_value(field: str, value: Any) -> Any:
    if field in ("start", "end", "updated_at", "created_at"):
        return to_iso(value)
    if field == "all_day":
        return 1 if value else 0
    if field == "recurrence":
        return _recurrence_json(value)
    return value


class SQLiteScheduleStore(BaseItemStore, TaskStore):
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS events (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    start_iso TEXT NOT NULL,
                    end_iso TEXT NOT NULL,
                    all_day INTEGER NOT NULL,
                    kind TEXT NOT NULL,
                    color TEXT NOT NULL,
                    location TEXT,
                    recurrence TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS events_owner_start_idx
                ON events (owner_id, start_iso)
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    status TEXT NOT NULL,
                    priority TEXT NOT NULL,
                    due_date TEXT,
                    assignee_ids TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def _row_to_item(self, row: tuple) -> BaseItem:
        return BaseItem(
            id=row[0],
            owner_id=row[1],
            title=row[2],
            description=row[3],
            start=parse_instant(row[4]),
            end=parse_instant(row[5]),
            all_day=bool(row[6]),
            kind=row[7],
            color=row[8],
            location=row[9],
            recurrence=RecurrenceRule.from_dict(json.loads(row[10])) if row[10] else None,
            created_at=parse_instant(row[11]),
            updated_at=parse_instant(row[12]),
        )

    def list_by_owner(self, owner_id: str) -> List[BaseItem]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM events
                WHERE owner_id = ?
                ORDER BY start_iso ASC
                """,
                (owner_id,),
            ).fetchall()
            return [self._row_to_item(row) for row in rows]

    def get(self, owner_id: str, item_id: str) -> Optional[BaseItem]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_EVENT_COLUMNS} FROM events WHERE owner_id = ? AND id = ?",
                (owner_id, item_id),
            ).fetchone()
            if row is None:
                return None
            return self._row_to_item(row)

    def insert(self, owner_id: str, payload: Dict[str, Any]) -> str:
        item_id = uuid.uuid4().hex
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO events ({_EVENT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item_id,
                    owner_id,
                    payload["title"],
                    payload.get("description"),
                    to_iso(payload["start"]),
                    to_iso(payload["end"]),
                    1 if payload.get("all_day") else 0,
                    payload["kind"],
                    payload["color"],
                    payload.get("location"),
                    _recurrence_json(payload.get("recurrence")),
                    to_iso(payload["created_at"]),
                    to_iso(payload["updated_at"]),
                ),
            )
        return item_id

    def patch(self, owner_id: str, item_id: str, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - set(_PATCHABLE)
        if unknown:
            raise ValueError(f"Unsupported fields: {', '.join(sorted(unknown))}")
        with self._connect() as conn:
            if not fields:
                exists = conn.execute(
                    "SELECT 1 FROM events WHERE owner_id = ? AND id = ? LIMIT 1",
                    (owner_id, item_id),
                ).fetchone()
                if exists is None:
                    raise EventNotFoundError(owner_id, item_id)
                return
            assignments = ", ".join(f"{_PATCHABLE[name]} = ?" for name in fields)
            values = [_column_value(name, value) for name, value in fields.items()]
            result = conn.execute(
                f"UPDATE events SET {assignments} WHERE owner_id = ? AND id = ?",
                (*values, owner_id, item_id),
            )
            if result.rowcount == 0:
                raise EventNotFoundError(owner_id, item_id)

    def delete_by_id(self, owner_id: str, item_id: str) -> None:
        with self._connect() as conn:
            result = conn.execute(
                "DELETE FROM events WHERE owner_id = ? AND id = ?",
                (owner_id, item_id),
            )
            if result.rowcount == 0:
                raise EventNotFoundError(owner_id, item_id)

    def upsert_task(self, task: ExternalTask) -> None:
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO tasks ({_TASK_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    description = excluded.description,
                    status = excluded.status,
                    priority = excluded.priority,
                    due_date = excluded.due_date,
                    assignee_ids = excluded.assignee_ids,
                    updated_at = excluded.updated_at
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    task.status,
                    task.priority,
                    task.due_date,
                    json.dumps(sorted(task.assignee_ids)),
                    task.created_at,
                    task.updated_at,
                ),
            )

    def list_by_assignee(self, owner_id: str) -> List[ExternalTask]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM tasks
                WHERE EXISTS (
                    SELECT 1 FROM json_each(tasks.assignee_ids) WHERE json_each.value = ?
                )
                ORDER BY created_at ASC
                """,
                (owner_id,),
            ).fetchall()
            return [
                ExternalTask(
                    id=row[0],
                    title=row[1],
                    description=row[2],
                    status=row[3],
                    priority=row[4],
                    due_date=row[5],
                    assignee_ids=frozenset(json.loads(row[6] or "[]")),
                    created_at=row[7],
                    updated_at=row[8],
                )
                for row in rows
            ]
