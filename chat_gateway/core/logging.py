# chat_gateway/core/logging.py

import logging
import sys
from typing import Optional

from chat_gateway.core.config import settings

# Loggers that stay at INFO regardless of LOG_LEVEL.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Per-frame protocol output from the websocket libraries.
QUIET_LOGGERS = ("websockets", "websockets.protocol", "wsproto")


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure the root logger for the gateway process.

    Level and line format come from ``settings.LOG_LEVEL`` and
    ``settings.LOG_FORMAT`` unless given explicitly. When uvicorn (or a
    test runner) has already installed handlers, only the level changes.
    """
    resolved = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    root.setLevel(resolved)
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt or settings.LOG_FORMAT))
    root.addHandler(handler)

    for name in SERVER_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)
