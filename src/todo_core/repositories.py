from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from threading import RLock
from typing import List, Optional, Protocol, runtime_checkable

from .errors import NotFoundError, ValidationError
from .models import Todo
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@runtime_checkable
class TodoStore(Protocol):
    """
    Storage capability for Todo records.

    Implementations are interchangeable and chosen at construction time:
    - InMemoryTodoStore: transient, process-local
    - BoxTodoStore: write-through to a persistent key-value box
    """

    def list(self) -> List[Todo]:
        """Return a snapshot of all Todos in insertion order."""
        ...

    def create(self, title: str) -> Todo:
        """Create and return a new Todo. Raises ValidationError for a blank title."""
        ...

    def toggle(self, todo_id: str) -> Todo:
        """Flip is_completed and return the updated Todo. Raises NotFoundError."""
        ...

    def update(self, todo_id: str, title: str) -> Todo:
        """Replace the title and return the updated Todo. Raises ValidationError or NotFoundError."""
        ...

    def delete(self, todo_id: str) -> None:
        """Remove the Todo if present. A missing id is not an error."""
        ...


def require_title(title: Optional[str]) -> str:
    """
    Reject titles that are empty once surrounding whitespace is removed.

    The title is returned unchanged; only the emptiness check sees the
    stripped value.
    """
    if title is None or not title.strip():
        raise ValidationError("Todo title cannot be empty.")
    return title


def new_todo(title: str) -> Todo:
    return Todo(
        id=str(uuid.uuid4()),
        title=require_title(title),
        is_completed=False,
        created_at=datetime.now(timezone.utc),
    )


class InMemoryTodoStore:
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, Todo] = {}

    def list(self) -> List[Todo]:
        with self._lock:
            return list(self._items.values())

    def create(self, title: str) -> Todo:
        todo = new_todo(title)
        with self._lock:
            self._items[todo.id] = todo
        logger.info("Created todo %s", todo.id)
        return todo

    def toggle(self, todo_id: str) -> Todo:
        with self._lock:
            existing = self._get_or_raise(todo_id)
            updated = existing.model_copy(update={"is_completed": not existing.is_completed})
            self._items[todo_id] = updated
            return updated

    def update(self, todo_id: str, title: str) -> Todo:
        require_title(title)
        with self._lock:
            existing = self._get_or_raise(todo_id)
            updated = existing.model_copy(update={"title": title})
            self._items[todo_id] = updated
            return updated

    def delete(self, todo_id: str) -> None:
        with self._lock:
            if self._items.pop(todo_id, None) is not None:
                logger.info("Deleted todo %s", todo_id)

    def _get_or_raise(self, todo_id: str) -> Todo:
        item = self._items.get(todo_id)
        if item is None:
            raise NotFoundError(todo_id=todo_id)
        return item


# PUBLIC_INTERFACE
def open_store(settings: Optional[Settings] = None) -> TodoStore:
    """
    Factory to return the configured store based on settings.
    - memory: InMemoryTodoStore
    - box: BoxTodoStore over an SQLiteBox opened at settings.box_path
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "box":
        from .box import BoxTodoStore, SQLiteBox

        logger.info("Opening todo box at %s", settings.box_path)
        return BoxTodoStore(SQLiteBox(settings.box_path))
    return InMemoryTodoStore()
