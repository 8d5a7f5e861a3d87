from __future__ import annotations

import logging
import os

import pytest

# Default to the memory backend so importing the app never touches the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todo_core.box import BoxTodoStore, SQLiteBox  # noqa: E402
from todo_core.repositories import InMemoryTodoStore  # noqa: E402


@pytest.fixture()
def box(tmp_path) -> SQLiteBox:
    return SQLiteBox(str(tmp_path / "todos.box.sqlite3"))


@pytest.fixture(params=["memory", "box"])
def store(request, tmp_path):
    """Each store implementation, fresh per test."""
    if request.param == "memory":
        return InMemoryTodoStore()
    return BoxTodoStore(SQLiteBox(str(tmp_path / "store.sqlite3")))


@pytest.fixture()
def pristine_root_logger():
    """Let a test run setup_logging and put the root logger back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    configured = getattr(root, "_todo_logging_configured", False)
    root._todo_logging_configured = False
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    root._todo_logging_configured = configured
