"""
SQLite task store.

The schema is intentionally simple and migration-safe:
- create table if missing
- use PRAGMA table_info to detect missing columns
- add columns with ALTER TABLE only when needed

Thread-safety:
- each method opens its own SQLite connection
"""

import contextlib
import dataclasses
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from task_importer.core.models import CandidateTask, StoredTask, TaskPage, TaskUpdate
from task_importer.exceptions import TaskStoreError

from .base import TaskStore

logger = structlog.get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqliteTaskStore(TaskStore):
    """SQLite-backed task store."""

    def __init__(self, db_path: Union[str, Path] = "tasks.sqlite3"):
        """
        Initialize store and create the schema if needed.

        Args:
            db_path: Database file path
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("task_store_ready", db=str(self._db_path), total=self.count())

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as e:
            raise TaskStoreError(f"Cannot open task database: {e}") from e
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextlib.contextmanager
    def _connection(self):
        """Connection that commits on success and maps sqlite errors."""
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise TaskStoreError(str(e)) from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT,
                    due_date TEXT,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("task_store_migration", column=name)

            add_col("description", "TEXT")
            add_col("due_date", "TEXT")
            add_col("completed", "INTEGER NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> StoredTask:
        return StoredTask(
            id=int(row["id"]),
            title=str(row["title"]),
            description=row["description"],
            due_date=date.fromisoformat(row["due_date"]) if row["due_date"] else None,
            completed=bool(row["completed"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _insert_params(task: CandidateTask, now: datetime) -> tuple:
        return (
            task.title,
            task.description or None,
            task.due_date.isoformat() if task.due_date else None,
            1 if task.completed else 0,
            now.isoformat(),
            now.isoformat(),
        )

    # ---- public API ----

    def count(self) -> int:
        with self._connection() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def list_all(self, page: int = 1, limit: Optional[int] = None) -> TaskPage:
        page = max(1, page)
        with self._connection() as conn:
            (total,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()

            sql = "SELECT * FROM tasks ORDER BY created_at DESC, id DESC"
            params: list[Any] = []
            if limit is not None:
                sql += " LIMIT ? OFFSET ?"
                params.extend([int(limit), (page - 1) * int(limit)])

            rows = conn.execute(sql, params).fetchall()

        return TaskPage(
            records=[self._row_to_task(r) for r in rows],
            total_count=int(total),
            page=page,
            limit=limit,
        )

    def find_by_id(self, task_id: int) -> Optional[StoredTask]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
        return self._row_to_task(row) if row else None

    def insert_one(self, task: CandidateTask) -> StoredTask:
        self.validate(task)

        with self._connection() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks (title, description, due_date, completed, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                self._insert_params(task, _now()),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise TaskStoreError("SQLite did not return lastrowid for tasks insert")

        logger.debug("task_inserted", id=rowid, title=task.title)
        stored = self.find_by_id(rowid)
        if stored is None:
            raise TaskStoreError(f"Inserted task {rowid} not found")
        return stored

    def insert_many(self, tasks: list[CandidateTask]) -> int:
        for task in tasks:
            self.validate(task)

        if not tasks:
            return 0

        now = _now()
        with self._connection() as conn:
            conn.executemany(
                """
                INSERT INTO tasks (title, description, due_date, completed, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [self._insert_params(task, now) for task in tasks],
            )

        logger.debug("tasks_bulk_inserted", count=len(tasks))
        return len(tasks)

    def update(self, task_id: int, changes: TaskUpdate) -> Optional[StoredTask]:
        existing = self.find_by_id(task_id)
        if existing is None:
            return None

        if changes.is_empty():
            return existing

        fields: list[str] = []
        params: list[Any] = []

        if changes.title is not None:
            fields.append("title = ?")
            params.append(changes.title)

        if changes.clear_description:
            fields.append("description = NULL")
        elif changes.description is not None:
            fields.append("description = ?")
            params.append(changes.description)

        if changes.clear_due_date:
            fields.append("due_date = NULL")
        elif changes.due_date is not None:
            fields.append("due_date = ?")
            params.append(changes.due_date.isoformat())

        if changes.completed is not None:
            fields.append("completed = ?")
            params.append(1 if changes.completed else 0)

        merged = dataclasses.replace(
            existing,
            title=changes.title if changes.title is not None else existing.title,
            description=None if changes.clear_description else (
                changes.description if changes.description is not None else existing.description
            ),
        )
        self.validate(merged)

        fields.append("updated_at = ?")
        params.append(_now().isoformat())
        params.append(int(task_id))

        with self._connection() as conn:
            conn.execute(f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?", params)

        return self.find_by_id(task_id)

    def delete(self, task_id: int) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            return cur.rowcount > 0
