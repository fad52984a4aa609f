"""
Logging configuration for the homepage service.

JSON lines in production (Railway), readable text locally. Components attach
structured fields with extra={"component": ..., ...}; both formatters emit them.
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional


# LogRecord attributes that are not user supplied extra fields
_STANDARD_FIELDS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
    'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'taskName',
    'getMessage', 'message', 'asctime'
})

# Set per HTTP request and per job run
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Third-party loggers and the minimum level we let through
_LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "apscheduler": logging.WARNING,
    "redis": logging.WARNING,
}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_FIELDS and not key.startswith('_')
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, extra fields merged at the top level."""

    def __init__(self, service_name: str = "homepage"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            **_extra_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=_json_default)


def _json_default(obj: Any) -> str:
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


class DevelopmentFormatter(logging.Formatter):
    """Plain text line followed by the extra fields as [key=value ...]."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{line} [{pairs}]"


class CorrelationFilter(logging.Filter):
    """Stamps records with the correlation id of the current scope, if any."""

    def filter(self, record: logging.LogRecord) -> bool:
        current = _correlation_id.get()
        if current is not None and not hasattr(record, 'correlation_id'):
            record.correlation_id = current
        return True


def new_correlation_id() -> str:
    return f"hp-{uuid.uuid4().hex[:12]}"


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Tag every record logged inside the block (and tasks spawned from it) with one id.

    Args:
        correlation_id: Id to use, a fresh one is generated when empty

    Yields:
        The active correlation id
    """
    token = _correlation_id.set(correlation_id or new_correlation_id())
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)


def setup_logging(
    level: str = "INFO",
    service_name: str = "homepage",
    enable_json: bool = True,
    enable_correlation: bool = False
) -> None:
    """
    Route all logging to a single stdout handler.

    Args:
        level: Root logging level name
        service_name: Value of the "service" field in JSON output
        enable_json: JSON lines instead of text
        enable_correlation: Add the correlation_id of the current request or job run

    Raises:
        ValueError: If the level is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JSONFormatter(service_name=service_name) if enable_json else DevelopmentFormatter()
    )
    if enable_correlation:
        handler.addFilter(CorrelationFilter())

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers[:] = [handler]

    for name, library_level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "component": "logger",
            "level": level.upper(),
            "json_enabled": enable_json,
            "correlation_enabled": enable_correlation
        }
    )
