"""Structured logging for the moderation engine.

Records are emitted as JSON lines tagged with a correlation ID. The engine
is synchronous, so one ID is bound per player evaluation with
``evaluation_context`` and every record logged inside it carries that ID.
"""

import json
import logging
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# LogRecord attributes that never go into the "extra" block
_RESERVED_RECORD_KEYS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", "correlation_id",
))

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s"


def get_correlation_id() -> str:
    """Return the bound correlation ID, binding a fresh UUID if none is set."""
    cid = correlation_id_var.get()
    if cid is None:
        cid = str(uuid.uuid4())
        correlation_id_var.set(cid)
    return cid


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    correlation_id_var.set(None)


@contextmanager
def evaluation_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of one evaluation.

    Args:
        correlation_id: ID to bind; a new UUID when omitted

    Yields:
        The bound correlation ID
    """
    token = correlation_id_var.set(correlation_id or str(uuid.uuid4()))
    try:
        yield correlation_id_var.get()
    finally:
        correlation_id_var.reset(token)


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def __init__(self, include_stack_trace: bool = True, include_extra_fields: bool = True):
        super().__init__()
        self.include_stack_trace = include_stack_trace
        self.include_extra_fields = include_extra_fields

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None) or get_correlation_id(),
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        if record.exc_info and self.include_stack_trace:
            exc_type, exc_value, exc_tb = record.exc_info
            document["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "stack_trace": traceback.format_exception(*record.exc_info) if exc_tb else None,
            }

        if self.include_extra_fields:
            extra = {
                key: _jsonable(value)
                for key, value in record.__dict__.items()
                if key not in _RESERVED_RECORD_KEYS
            }
            if extra:
                document["extra"] = extra

        return json.dumps(document, default=str)


class CorrelationIdFilter(logging.Filter):
    """Stamp the bound correlation ID onto records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()
        return True


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    include_stack_trace: bool = True,
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Log level name, case-insensitive
        json_format: Emit JSON documents instead of plain text lines
        include_stack_trace: Attach formatted tracebacks to JSON error records
    """
    numeric_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.addFilter(CorrelationIdFilter())
    if json_format:
        handler.setFormatter(StructuredFormatter(include_stack_trace=include_stack_trace))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    root_logger.addHandler(handler)


def setup_logging_from_settings() -> None:
    """Configure logging from ``modpanel.core.config.settings``."""
    from modpanel.core.config import settings

    setup_logging(
        level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
        json_format=settings.LOG_JSON_FORMAT,
        include_stack_trace=settings.LOG_INCLUDE_STACK_TRACE,
    )
    log_info(
        logging.getLogger(__name__),
        "Logging configured",
        project=settings.PROJECT_NAME,
        version=settings.VERSION,
    )


def _log(logger: logging.Logger, level: int, message: str, exc_info: Any = None, **extra: Any) -> None:
    extra["correlation_id"] = get_correlation_id()
    logger.log(level, message, exc_info=exc_info, extra=extra)


def log_error(
    logger: logging.Logger,
    message: str,
    exception: Optional[Exception] = None,
    **extra: Any,
) -> None:
    """Log an error with the correlation ID and an optional exception.

    Args:
        logger: Logger instance
        message: Error message
        exception: Exception whose traceback should be attached
        **extra: Additional context fields
    """
    _log(logger, logging.ERROR, message, exc_info=exception, **extra)


def log_warning(logger: logging.Logger, message: str, **extra: Any) -> None:
    _log(logger, logging.WARNING, message, **extra)


def log_info(logger: logging.Logger, message: str, **extra: Any) -> None:
    _log(logger, logging.INFO, message, **extra)
