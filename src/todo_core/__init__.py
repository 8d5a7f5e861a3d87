"""
Todo list service.

Exposes the domain pieces for programmatic use; the FastAPI app lives in
`todo_core.main`.
"""

from .coordinator import Failed, Loading, Ready, TodoCoordinator, get_coordinator
from .errors import NotFoundError, StorageError, TodoError, UnexpectedError, ValidationError
from .models import Todo
from .repositories import InMemoryTodoStore, TodoStore, open_store

__all__ = [
    "Failed",
    "InMemoryTodoStore",
    "Loading",
    "NotFoundError",
    "Ready",
    "StorageError",
    "Todo",
    "TodoCoordinator",
    "TodoError",
    "TodoStore",
    "UnexpectedError",
    "ValidationError",
    "get_coordinator",
    "open_store",
]
