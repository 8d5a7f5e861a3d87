from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from threading import RLock
from typing import Callable, List, Tuple, TypeVar, Union

from .errors import TodoError, UnexpectedError
from .models import Todo
from .repositories import TodoStore, open_store
from .settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Loading:
    """Nothing has been loaded from the store yet."""

    status: str = field(default="loading", init=False)


@dataclass(frozen=True)
class Ready:
    todos: Tuple[Todo, ...]
    status: str = field(default="ready", init=False)


@dataclass(frozen=True)
class Failed:
    error: TodoError
    status: str = field(default="failed", init=False)


TodoListState = Union[Loading, Ready, Failed]
Listener = Callable[[TodoListState], None]


def translate_error(exc: Exception) -> TodoError:
    """Map any exception onto the closed TodoError taxonomy."""
    if isinstance(exc, TodoError):
        return exc
    wrapped = UnexpectedError(str(exc) or type(exc).__name__)
    wrapped.__cause__ = exc
    return wrapped


# PUBLIC_INTERFACE
class TodoCoordinator:
    """
    Owns the displayed todo list state on top of a TodoStore.

    The state starts as Loading and is loaded from the store on first
    observation. Every successful mutation is followed by a full reload of the
    collection; a failed mutation raises to the caller and leaves the published
    state as it was. Nothing is retried.

    Observers either poll `state()` or register a listener with `subscribe()`.
    """

    def __init__(self, store: TodoStore) -> None:
        self._store = store
        self._state: TodoListState = Loading()
        self._loaded = False
        self._listeners: List[Listener] = []
        self._lock = RLock()

    @property
    def store(self) -> TodoStore:
        return self._store

    def state(self) -> TodoListState:
        """Return the current state, loading it from the store on first use."""
        with self._lock:
            if not self._loaded:
                self._reload()
            return self._state

    def peek(self) -> TodoListState:
        """Return the current state without triggering a load."""
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register `listener` for every future state transition.

        The listener immediately receives the current state (loading it first
        if needed). Returns a callable that removes the listener again.
        """
        with self._lock:
            current = self.state()
            self._listeners.append(listener)
            # Delivered under the lock; no publish can land between read and delivery
            self._deliver(listener, current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def invalidate(self) -> TodoListState:
        """Drop the current collection and reload it from the store."""
        with self._lock:
            return self._reload()

    def add(self, title: str) -> Todo:
        return self._mutate("add", lambda: self._store.create(title))

    def toggle(self, todo_id: str) -> Todo:
        return self._mutate("toggle", lambda: self._store.toggle(todo_id))

    def update(self, todo_id: str, title: str) -> Todo:
        return self._mutate("update", lambda: self._store.update(todo_id, title))

    def delete(self, todo_id: str) -> None:
        self._mutate("delete", lambda: self._store.delete(todo_id))

    def _mutate(self, action: str, operation: Callable[[], T]) -> T:
        with self._lock:
            try:
                result = operation()
            except Exception as exc:
                error = translate_error(exc)
                logger.warning("Todo %s failed: %s", action, error.message)
                if error is exc:
                    raise
                raise error from exc
            self._reload()
            return result

    def _reload(self) -> TodoListState:
        try:
            todos = self._store.list()
        except Exception as exc:
            error = translate_error(exc)
            logger.warning("Loading todos failed: %s", error.message)
            new_state: TodoListState = Failed(error)
        else:
            new_state = Ready(tuple(todos))
        self._loaded = True
        self._publish(new_state)
        return new_state

    def _publish(self, new_state: TodoListState) -> None:
        logger.debug("Todo list state -> %s", new_state.status)
        self._state = new_state
        for listener in list(self._listeners):
            self._deliver(listener, new_state)

    @staticmethod
    def _deliver(listener: Listener, new_state: TodoListState) -> None:
        try:
            listener(new_state)
        except Exception:
            logger.exception("Todo state listener %r raised", listener)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_coordinator() -> TodoCoordinator:
    """
    Return the process-wide coordinator over the configured store.

    The store (and its box, when persistent) is opened on the first call and
    kept until app shutdown, which closes it and clears this cache.
    """
    return TodoCoordinator(open_store(get_settings()))
