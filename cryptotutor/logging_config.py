"""
Central logging configuration for the Crypto Tutor service.

Provides:
- Structured logging (JSON in production, human-readable in development)
- Request correlation via contextvars (request_id set by middleware)
- Learner-session correlation (session_id set while a session handles an event)

Usage:
    from cryptotutor.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Quiz submitted", extra={"subtopic_id": subtopic_id})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

# Set by RequestIdMiddleware for the duration of a request
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
# Set by the session routes while a LessonSession is being driven
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)

_CORRELATION_ATTRS = ("request_id", "session_id")

_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", "request_id", "session_id",
))


def get_request_id() -> Optional[str]:
    """Get the current request ID from context, if set."""
    return request_id_var.get()


class CorrelationFilter(logging.Filter):
    """Adds request_id and session_id from context to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        record.session_id = session_id_var.get() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for production log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in _CORRELATION_ATTRS:
            value = getattr(record, attr, None)
            if value and value != "-":
                log_obj[attr] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Extra fields passed via extra= in the log call
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or value is None:
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        return json.dumps(log_obj)


# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpx", "openai")

_DEV_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s sess=%(session_id)s %(message)s"

_factory_installed = False


def _install_record_factory() -> None:
    """Give every record the correlation attrs, even ones never filtered."""
    global _factory_installed
    if _factory_installed:
        return
    base_factory = logging.getLogRecordFactory()

    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = base_factory(*args, **kwargs)
        for attr in _CORRELATION_ATTRS:
            if not hasattr(record, attr):
                setattr(record, attr, "-")
        return record

    logging.setLogRecordFactory(record_factory)
    _factory_installed = True


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure application-wide logging. Safe to call more than once.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'production' logs JSON lines, anything else a compact text format
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)
    _install_record_factory()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(CorrelationFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_DEV_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Module logger. Records carry request_id and session_id when set; add
    structured fields with extra=, e.g.
        logger.info("Session created", extra={"lesson_id": lesson_id, "user_id": user_id})
    """
    return logging.getLogger(name)
