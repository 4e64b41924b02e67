"""Structured logging configuration for bt2magnet.

Provides logging setup with correlation IDs, structured output, Rich console
output and configurable log levels.
"""

from __future__ import annotations

import json
import logging
import logging.config
import sys
import time
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from rich.console import Console
from rich.logging import RichHandler

from bt2magnet.utils.exceptions import Bt2MagnetError

if TYPE_CHECKING:
    from bt2magnet.models import ObservabilityConfig

ROOT_LOGGER_NAME = "bt2magnet"

# Help type checker understand the ContextVar generic with a None default
correlation_id: ContextVar[str | None] = cast(
    "ContextVar[str | None]",
    ContextVar("correlation_id", default=None),
)

_RECORD_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "correlation_id",
    }
)


class CorrelationFilter(logging.Filter):
    """Filter to add correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation ID to log record."""
        record.correlation_id = correlation_id.get() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "correlation_id"):
            log_entry["correlation_id"] = record.correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Anything passed through ``extra=``
        log_entry.update(
            {
                key: value
                for key, value in record.__dict__.items()
                if key not in _RECORD_ATTRIBUTES
            }
        )

        return json.dumps(log_entry, default=str)


def create_rich_handler(level: str | int = logging.INFO) -> logging.Handler:
    """Create a RichHandler writing to stderr."""
    console = Console(stderr=True, markup=False)
    handler = RichHandler(
        console=console,
        level=level,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.addFilter(CorrelationFilter())
    return handler


def setup_logging(config: ObservabilityConfig) -> None:
    """Set up logging configuration."""
    level = config.log_level.value

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
            },
            "simple": {
                "format": "%(asctime)s %(levelname)s %(name)s.%(funcName)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "filters": {
            "correlation": {
                "()": CorrelationFilter,
            },
        },
        "handlers": {},
        "loggers": {
            ROOT_LOGGER_NAME: {
                "level": level,
                "handlers": [],
                "propagate": False,
            },
        },
    }

    # Structured output goes to a plain stream; otherwise Rich renders the console
    if config.structured_logging:
        logging_config["handlers"]["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "structured",
            "filters": ["correlation"],
            "stream": sys.stderr,
        }
        logging_config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("console")

    if config.log_file:
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "structured" if config.structured_logging else "simple",
            "filters": ["correlation"],
            "filename": config.log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
            "encoding": "utf-8",
        }
        logging_config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(logging_config)

    if not config.structured_logging:
        logging.getLogger(ROOT_LOGGER_NAME).addHandler(create_rich_handler(level))

    if config.log_correlation_id:
        correlation_id.set(str(uuid.uuid4()))


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_correlation_id(corr_id: str | None = None) -> str:
    """Set correlation ID for the current context."""
    if corr_id is None:
        corr_id = str(uuid.uuid4())
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id.get()


class LoggingContext:
    """Context manager that logs the start, end and duration of an operation."""

    def __init__(self, operation: str, logger: logging.Logger | None = None, **kwargs: Any):
        """Initialize operation context manager."""
        self.operation = operation
        self.kwargs = kwargs
        self.logger = logger or get_logger("operations")
        self.start_time: float | None = None

    def __enter__(self) -> LoggingContext:
        """Enter the context manager."""
        self.start_time = time.perf_counter()
        set_correlation_id()
        self.logger.debug("Starting %s", self.operation, extra=self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Exit the context manager."""
        duration = time.perf_counter() - self.start_time if self.start_time else 0.0

        if exc_type is None:
            self.logger.debug(
                "Completed %s in %.3fs",
                self.operation,
                duration,
                extra=self.kwargs,
            )
        else:
            self.logger.debug(
                "Failed %s in %.3fs: %s",
                self.operation,
                duration,
                exc_val,
                extra=self.kwargs,
            )

        return False  # Don't suppress exceptions


def log_exception(logger: logging.Logger, exc: Exception, context: str = "") -> None:
    """Log an exception with context."""
    if isinstance(exc, Bt2MagnetError):
        logger.error(
            "%s: %s",
            context,
            exc.message,
            extra={"details": exc.details, "error_kind": exc.kind},
        )
    else:
        logger.error("%s: %s", context, exc, exc_info=True)
