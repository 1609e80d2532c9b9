"""
Logging helpers for toolseeker.

The library never configures logging on import. Hosts call configure_logging()
once at startup; advisors bind the active session id via session_scope() so
that every record emitted while a hook runs can be correlated to its
conversation.
"""

import contextlib
import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional

from .config import Settings, settings as default_settings

# Session id of the conversation whose hook is currently executing.
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id_var", default=None)

LOGGER_NAME = "toolseeker"


class StructuredFormatter(logging.Formatter):
    """Formats records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        session_id = session_id_var.get()
        if session_id:
            payload["session_id"] = session_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


@contextlib.contextmanager
def session_scope(session_id: Optional[str]) -> Iterator[None]:
    """Bind *session_id* to log records for the duration of the block."""
    token = session_id_var.set(session_id)
    try:
        yield
    finally:
        session_id_var.reset(token)


def configure_logging(config: Optional[Settings] = None) -> logging.Logger:
    """
    Apply log level and (optionally) structured output to the toolseeker logger.

    Args:
        config: Settings to read from. Defaults to the module-level settings.

    Returns:
        The configured package logger.
    """
    config = config or default_settings
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, config.log_level))

    if config.structured_logs:
        if not any(isinstance(h.formatter, StructuredFormatter) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredFormatter())
            logger.addHandler(handler)
        logger.propagate = False
    return logger
