# src/taskbell/tasks/task_store.py

from __future__ import annotations

import contextlib
import itertools
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..core.ports import ChangeListener
from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStoreError(RuntimeError):
    """A store operation failed (I/O, locking, corrupt database...)."""


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Every committed write is announced to subscribed listeners with the change
    kind ("insert", "update", "delete"). Listeners run synchronously in the
    caller's thread after the commit.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._listeners: dict[int, ChangeListener] = {}
        self._tokens = itertools.count(1)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except TaskStoreError:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        self._listeners.clear()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    user_date TEXT,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("user_date", "TEXT")
            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            text=str(row["text"] or ""),
            user_date=row["user_date"] or None,
            completed=bool(row["completed"]),
            created_at=float(row["created_at"] or 0.0),
        )

    def _write(self, sql: str, params: tuple[Any, ...] | list[Any]) -> tuple[int | None, int]:
        """Run one statement in its own transaction; returns (lastrowid, rowcount)."""
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.lastrowid, cur.rowcount
        except sqlite3.Error as e:
            raise TaskStoreError(f"write failed: {e}") from e
        finally:
            conn.close()

    def _emit(self, kind: str) -> None:
        for token, listener in list(self._listeners.items()):
            try:
                listener(kind)
            except Exception:
                logger.exception("Change listener failed token=%s kind=%s", token, kind)

    # ---- change stream ----

    def subscribe(self, listener: ChangeListener) -> int:
        token = next(self._tokens)
        self._listeners[token] = listener
        logger.debug("Change listener subscribed token=%s", token)
        return token

    def unsubscribe(self, token: int) -> None:
        if self._listeners.pop(token, None) is not None:
            logger.debug("Change listener unsubscribed token=%s", token)

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        except sqlite3.Error as e:
            raise TaskStoreError(f"count failed: {e}") from e
        finally:
            conn.close()

    def list_tasks(self) -> list[Task]:
        """All tasks, newest id first."""
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM tasks ORDER BY id DESC").fetchall()
            return [self._row_to_task(r) for r in rows]
        except sqlite3.Error as e:
            raise TaskStoreError(f"select failed: {e}") from e
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None
        except sqlite3.Error as e:
            raise TaskStoreError(f"select failed: {e}") from e
        finally:
            conn.close()

    def insert_task(self, *, text: str, user_date: str | None, completed: bool = False) -> int:
        if not text or not text.strip():
            raise ValueError("text is required")

        now = time.time()
        rowid, _ = self._write(
            """
            INSERT INTO tasks(text, user_date, completed, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (text.strip(), user_date or None, int(bool(completed)), now, now),
        )
        if rowid is None:
            raise TaskStoreError("SQLite did not return lastrowid for tasks insert")
        task_id = int(rowid)
        logger.debug("Task added id=%s user_date=%s", task_id, user_date)
        self._emit("insert")
        return task_id

    def update_task(
        self,
        task_id: int,
        *,
        text: str | None = None,
        user_date: str | None = None,
        clear_user_date: bool = False,
        completed: bool | None = None,
    ) -> None:
        fields: list[str] = []
        params: list[Any] = []

        if text is not None:
            if not text.strip():
                raise ValueError("text must not be empty")
            fields.append("text = ?")
            params.append(text.strip())

        if clear_user_date:
            fields.append("user_date = NULL")
        elif user_date is not None:
            fields.append("user_date = ?")
            params.append(user_date.strip() or None)

        if completed is not None:
            fields.append("completed = ?")
            params.append(int(bool(completed)))

        if not fields:
            return

        fields.append("updated_at = ?")
        params.append(time.time())
        params.append(int(task_id))

        _, rows = self._write(f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?", params)
        logger.debug("Task updated id=%s rows=%s", task_id, rows)
        if rows:
            self._emit("update")

    def delete_task(self, task_id: int) -> None:
        _, rows = self._write("DELETE FROM tasks WHERE id = ?", (int(task_id),))
        logger.debug("Task deleted id=%s rows=%s", task_id, rows)
        if rows:
            self._emit("delete")

    def delete_completed(self) -> int:
        _, rows = self._write("DELETE FROM tasks WHERE completed = 1", ())
        n = max(0, rows)
        logger.info("Cleared completed tasks count=%s", n)
        if n:
            self._emit("delete")
        return n
