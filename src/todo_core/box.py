from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from threading import RLock
from typing import Generator, List, Optional, Protocol

import pydantic

from .errors import NotFoundError, StorageError
from .models import Todo
from .repositories import new_todo, require_title

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class KeyValueBox(Protocol):
    """Minimal persistent key-value box: string keys, string values, insertion ordered."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def values(self) -> List[str]:
        ...

    def close(self) -> None:
        ...


@dataclass(frozen=True)
class _Cols:
    table: str = "box"
    key: str = "key"
    value: str = "value"


_COLS = _Cols()


class SQLiteBox:
    """
    Key-value box stored in a single SQLite table.

    Rows keep their rowid when overwritten, so iteration order is the order in
    which keys were first written. Every put/delete commits on its own.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._closed = False
        self._init_db()

    @property
    def path(self) -> str:
        return self._db_path

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        if self._closed:
            raise StorageError("Todo box is closed")
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            logger.error("Could not open todo box %s: %s", self._db_path, exc)
            raise StorageError(f"Could not open todo box: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            logger.error("Todo box operation failed on %s: %s", self._db_path, exc)
            raise StorageError(f"Todo box operation failed: {exc}") from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
            ).fetchone()
            return None if row is None else str(row[0])

    def put(self, key: str, value: str) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}) VALUES (?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET {_COLS.value} = excluded.{_COLS.value}
                """,
                (key, value),
            )

    def delete(self, key: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))
            return cur.rowcount > 0

    def keys(self) -> List[str]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT {_COLS.key} FROM {_COLS.table} ORDER BY rowid").fetchall()
            return [str(r[0]) for r in rows]

    def values(self) -> List[str]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT {_COLS.value} FROM {_COLS.table} ORDER BY rowid").fetchall()
            return [str(r[0]) for r in rows]

    def close(self) -> None:
        self._closed = True


class BoxTodoStore:
    """
    Todo store writing through to an injected key-value box.

    Records are stored as JSON under their id. A value that no longer decodes
    into a Todo is reported as a StorageError rather than skipped.
    """

    def __init__(self, box: KeyValueBox) -> None:
        self._box = box
        self._lock = RLock()

    @property
    def box(self) -> KeyValueBox:
        return self._box

    def _decode(self, raw: str) -> Todo:
        try:
            return Todo.model_validate_json(raw)
        except pydantic.ValidationError as exc:
            logger.error("Undecodable todo record in box: %s", exc)
            raise StorageError(
                "Stored todo record is corrupt",
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc

    def _write(self, todo: Todo) -> Todo:
        self._box.put(todo.id, todo.model_dump_json())
        return todo

    def _get_or_raise(self, todo_id: str) -> Todo:
        raw = self._box.get(todo_id)
        if raw is None:
            raise NotFoundError(todo_id=todo_id)
        return self._decode(raw)

    def list(self) -> List[Todo]:
        return [self._decode(raw) for raw in self._box.values()]

    def create(self, title: str) -> Todo:
        todo = new_todo(title)
        with self._lock:
            self._write(todo)
        logger.info("Created todo %s", todo.id)
        return todo

    def toggle(self, todo_id: str) -> Todo:
        with self._lock:
            existing = self._get_or_raise(todo_id)
            return self._write(existing.model_copy(update={"is_completed": not existing.is_completed}))

    def update(self, todo_id: str, title: str) -> Todo:
        require_title(title)
        with self._lock:
            existing = self._get_or_raise(todo_id)
            return self._write(existing.model_copy(update={"title": title}))

    def delete(self, todo_id: str) -> None:
        with self._lock:
            removed = self._box.delete(todo_id)
        if removed:
            logger.info("Deleted todo %s", todo_id)

    def close(self) -> None:
        self._box.close()
