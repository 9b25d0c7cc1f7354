"""Correlation ID logging context for tracing a conflict check across modules.

Every ``check_conflicts`` or ``optimize_schedule`` call runs under a check
ID, so the log lines of one check (calendar filters, each checker, the
alternative search) can be grouped even when many checks run concurrently.

Usage:
    from booking_conflicts.logging_context import get_check_logger, set_check_id

    set_check_id("CHK-abc123")
    logger = get_check_logger(__name__)
    logger.info("Checking slot")  # record.check_id == "CHK-abc123"
"""

import logging
import uuid
from contextvars import ContextVar, Token

NO_CHECK_ID = "NO_CHECK_ID"

_check_id: ContextVar[str] = ContextVar("check_id", default=NO_CHECK_ID)


def new_check_id(prefix: str = "CHK") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:6].upper()}"


def set_check_id(check_id: str) -> Token:
    """Set the correlation ID for the current context.

    Returns the token needed to restore the previous value.
    """
    return _check_id.set(check_id)


def reset_check_id(token: Token) -> None:
    _check_id.reset(token)


def get_check_id() -> str:
    """Retrieve the current correlation ID."""
    return _check_id.get()


class CheckIdFilter(logging.Filter):
    """Injects check_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.check_id = _check_id.get()  # type: ignore[attr-defined]
        return True


def get_check_logger(name: str) -> logging.Logger:
    """Return a logger with the CheckIdFilter attached.

    The filter adds ``check_id`` to each record so formatters can
    include ``%(check_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CheckIdFilter) for f in logger.filters):
        logger.addFilter(CheckIdFilter())
    return logger
