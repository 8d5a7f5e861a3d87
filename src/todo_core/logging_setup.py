from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .settings import Settings, get_settings

_LOG_FILE_NAME = "todo_core.log"
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


# PUBLIC_INTERFACE
def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure the root logger once per process.

    Repeated calls only adjust the level of the already installed handlers.
    A rotating file handler is added when `settings.log_dir` is set.
    """
    settings = settings or get_settings()
    log_level = settings.log_level
    root_logger = logging.getLogger()
    if getattr(root_logger, "_todo_logging_configured", False):
        root_logger.setLevel(log_level)
        for handler in root_logger.handlers:
            handler.setLevel(log_level)
        return

    formatter = logging.Formatter(_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)

    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    root_logger.addHandler(stream_handler)

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / _LOG_FILE_NAME,
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_BACKUP_COUNT,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger._todo_logging_configured = True  # type: ignore[attr-defined]
