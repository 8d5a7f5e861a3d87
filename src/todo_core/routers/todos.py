from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..coordinator import TodoCoordinator, get_coordinator
from ..schemas import ErrorOut, TodoCreate, TodoListView, TodoOut, TodoRename

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)

_ERROR_RESPONSES = {
    404: {"model": ErrorOut, "description": "Todo not found"},
    422: {"model": ErrorOut, "description": "Validation error"},
    503: {"model": ErrorOut, "description": "Storage unavailable"},
}


def _get_coordinator(coordinator: TodoCoordinator = Depends(get_coordinator)) -> TodoCoordinator:
    """
    Dependency wrapper for the coordinator to keep signatures clean.
    """
    return coordinator


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TodoListView,
    summary="List Todos",
    description=(
        "Return the current todo list state. The list is loaded from the store on first access.\n\n"
        "Query parameters:\n"
        "- completed: only include items with this completion status"
    ),
    responses={200: {"description": "Current state returned"}},
)
def list_todos(
    completed: Optional[bool] = Query(None, description="Filter by completion status"),
    coordinator: TodoCoordinator = Depends(_get_coordinator),
) -> TodoListView:
    """
    Return the coordinator state as loading, ready (with items) or failed (with error).
    """
    return TodoListView.from_state(coordinator.state(), completed=completed)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TodoListView,
    summary="Reload Todos",
    description="Discard the current list and reload it from the store.",
)
def refresh_todos(coordinator: TodoCoordinator = Depends(_get_coordinator)) -> TodoListView:
    return TodoListView.from_state(coordinator.invalidate())


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={201: {"description": "Todo created successfully"}, **_ERROR_RESPONSES},
)
def create_todo(payload: TodoCreate, coordinator: TodoCoordinator = Depends(_get_coordinator)) -> TodoOut:
    """
    Create a new Todo. Blank titles are rejected with 422.
    """
    return TodoOut.from_todo(coordinator.add(payload.title))


# PUBLIC_INTERFACE
@router.post(
    "/{todo_id}/toggle",
    response_model=TodoOut,
    summary="Toggle Todo",
    description="Flip the completion status of a Todo item.",
    responses={200: {"description": "Todo toggled"}, **_ERROR_RESPONSES},
)
def toggle_todo(todo_id: str, coordinator: TodoCoordinator = Depends(_get_coordinator)) -> TodoOut:
    return TodoOut.from_todo(coordinator.toggle(todo_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Rename Todo",
    description="Replace the title of a Todo item. Completion status and creation time are kept.",
    responses={200: {"description": "Todo updated"}, **_ERROR_RESPONSES},
)
def rename_todo(
    todo_id: str,
    payload: TodoRename,
    coordinator: TodoCoordinator = Depends(_get_coordinator),
) -> TodoOut:
    return TodoOut.from_todo(coordinator.update(todo_id, payload.title))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete a Todo item by ID. Deleting an unknown ID also succeeds.",
    responses={204: {"description": "Todo deleted"}, 503: _ERROR_RESPONSES[503]},
)
def delete_todo(todo_id: str, coordinator: TodoCoordinator = Depends(_get_coordinator)) -> Response:
    """
    Delete a Todo. Always 204 unless the store fails.
    """
    coordinator.delete(todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
