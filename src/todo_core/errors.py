from __future__ import annotations

from typing import Any, Optional


# PUBLIC_INTERFACE
class TodoError(Exception):
    """
    Base class for the closed set of errors raised by stores and the coordinator.

    Each subclass carries a stable machine-readable `code`; `message` is meant
    for display to an end user.
    """

    code: str = "todo_error"

    def __init__(self, message: str, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __reduce__(self):
        # Rebuild from the base signature, then restore subclass attributes
        return (type(self), (self.message, self.detail), dict(self.__dict__))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }


class ValidationError(TodoError):
    """A title was empty (or whitespace only)."""

    code = "validation_error"


class NotFoundError(TodoError):
    """No Todo with the requested id exists."""

    code = "not_found"

    def __init__(
        self,
        message: str = "Todo not found",
        detail: Optional[Any] = None,
        *,
        todo_id: Optional[str] = None,
    ) -> None:
        if detail is None and todo_id is not None:
            detail = {"id": todo_id}
        super().__init__(message, detail)
        self.todo_id = todo_id


class StorageError(TodoError):
    """The backing store failed to read, write or decode a record."""

    code = "storage_error"


class UnexpectedError(TodoError):
    code = "unexpected_error"
