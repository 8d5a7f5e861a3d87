from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .coordinator import Failed, Ready, TodoListState
from .models import Todo


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    The title is passed to the store as submitted; blank titles are rejected
    there with a ValidationError.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy milk"}})

    title: str = Field(..., description="Title for the new todo item")


# PUBLIC_INTERFACE
class TodoRename(BaseModel):
    """
    Schema for replacing the title of an existing Todo item.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy oat milk"}})

    title: str = Field(..., description="New title for the todo item")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "0b8f5a9e-6d1c-4d6b-9a3e-2f1f7c1e4b2a",
                "title": "Buy milk",
                "is_completed": False,
                "created_at": "2025-01-25T10:15:30.123456+00:00",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Title of the todo item")
    is_completed: bool = Field(..., description="Completion status flag")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")

    @classmethod
    def from_todo(cls, todo: Todo) -> "TodoOut":
        return cls.model_validate(todo)


class ErrorOut(BaseModel):
    error: str = Field(..., description="Error class name")
    code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Human readable message")
    detail: Optional[Any] = Field(default=None, description="Additional error context")


# PUBLIC_INTERFACE
class TodoListView(BaseModel):
    """
    Snapshot of the coordinator state.

    `items` is empty unless status is 'ready'; `error` is only set when status
    is 'failed'.
    """

    status: str = Field(..., description="One of loading, ready, failed")
    items: List[TodoOut] = Field(default_factory=list, description="Todo items when ready")
    error: Optional[ErrorOut] = Field(default=None, description="Load failure when failed")

    @classmethod
    def from_state(cls, state: TodoListState, completed: Optional[bool] = None) -> "TodoListView":
        if isinstance(state, Ready):
            todos = [t for t in state.todos if completed is None or t.is_completed == completed]
            return cls(status=state.status, items=[TodoOut.from_todo(t) for t in todos])
        if isinstance(state, Failed):
            return cls(status=state.status, error=ErrorOut(**state.error.to_dict()))
        return cls(status=state.status)
