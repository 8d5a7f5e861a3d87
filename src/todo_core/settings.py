from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

BACKENDS = {"memory", "box"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'box'
    - BOX_PATH: path to the sqlite file backing the key-value box. Default './data/todos.box.sqlite3'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name (default: INFO)
    - LOG_DIR: directory for a rotating log file; stdout only when unset
    """

    persistence_backend: str
    box_path: str
    cors_allow_origins: List[str]
    log_level: int
    log_dir: Optional[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str, default: int = logging.INFO) -> int:
    level = logging.getLevelName(value.strip().upper())
    if isinstance(level, int):
        return level
    return default


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in BACKENDS:
        # Fallback to memory if unsupported
        backend = "memory"

    box_path = _get_env("BOX_PATH", "./data/todos.box.sqlite3").strip()
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))
    log_dir = os.getenv("LOG_DIR") or None

    return Settings(
        persistence_backend=backend,
        box_path=box_path,
        cors_allow_origins=origins,
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
        log_dir=log_dir.strip() if log_dir else None,
    )
