from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .coordinator import get_coordinator
from .errors import NotFoundError, StorageError, TodoError, ValidationError
from .logging_setup import setup_logging
from .routers import todos as todos_router
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todos",
        "description": "Create, toggle, rename, delete and list Todo items.",
    },
]

_settings = get_settings()

_STATUS_BY_ERROR = {
    ValidationError: 422,
    NotFoundError: 404,
    StorageError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging(_settings)
    # Open the store once and load the list before serving requests
    coordinator = get_coordinator()
    coordinator.state()
    logger.info("Todo service started with %s backend", _settings.persistence_backend)
    yield
    close = getattr(coordinator.store, "close", None)
    if callable(close):
        close()
    # The next startup opens a fresh store instead of reusing the closed one
    get_coordinator.cache_clear()


app = FastAPI(
    title="Todo Service",
    description="Todo list service with a reloading state coordinator over pluggable stores.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "code": "validation_error",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "code": ValidationError.code,
            "message": "Request validation failed",
            "detail": exc.errors(),
        },
    )


@app.exception_handler(TodoError)
async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    """
    Map the todo error taxonomy onto HTTP status codes.

    ValidationError -> 422, NotFoundError -> 404, StorageError -> 503,
    anything else (UnexpectedError) -> 500.
    """
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    if status_code >= 500:
        logger.error(
            "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message
        )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the configured backend.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


app.include_router(todos_router.router)
