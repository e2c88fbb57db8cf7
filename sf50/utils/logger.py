"""
Logging configuration for the SF-50 assistant.

Provides a centralized logger that can be configured via environment variables.
Scenario and answer text may contain personal data, so callers log lengths,
codes and counts rather than message content. Records are stamped with the
dialogue session they belong to, so one session's turns can be followed
without logging what was said.
"""
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

# Get log level from environment variable (default: INFO)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_session_id: ContextVar[str] = ContextVar("sf50_session_id", default="-")


class SessionFilter(logging.Filter):
    """Adds ``session_id`` to every record ('-' outside a session)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()
        return True


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with a session id."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


logger = logging.getLogger("sf50")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.addFilter(SessionFilter())

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - [session=%(session_id)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# Prevent propagation to root logger (avoid duplicate logs)
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (will be appended to 'sf50')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"sf50.{name}")
    return logger
