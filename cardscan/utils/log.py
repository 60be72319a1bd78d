"""Logging configuration using structlog."""

import logging
import sys
import time
from typing import Any, Dict, List, Optional

import structlog

from .config import settings


def _renderer(fmt: str):
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None):
    """Configure structured logging.

    Logs go to stderr so command output on stdout stays machine readable.
    ``level`` and ``fmt`` default to LOG_LEVEL and LOG_FORMAT from settings.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    fmt = (fmt or settings.LOG_FORMAT).lower()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _renderer(fmt),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a configured logger instance."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)


def bind_scan_context(**values: Any) -> None:
    """Attach values (e.g. session or device id) to every log line in this context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_scan_context() -> None:
    structlog.contextvars.clear_contextvars()


class LoggerMixin:
    """Adds a per-class logger and timed operation helpers."""

    @property
    def logger(self) -> structlog.BoundLogger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

    @staticmethod
    def _fields(context: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        fields = {k: v for k, v in context.items() if k not in ("event", "started")}
        if "started" in context:
            fields["duration_ms"] = int((time.perf_counter() - context["started"]) * 1000)
        fields.update(kwargs)
        return fields

    def log_start(self, event: str, **kwargs: Any) -> Dict[str, Any]:
        """Log the start of an operation and return the context to finish it with."""
        context = {"event": event, "started": time.perf_counter(), **kwargs}
        self.logger.info(f"{event} started", **kwargs)
        return context

    def log_success(self, context: Dict[str, Any], **kwargs: Any):
        self.logger.info(f"{context.get('event', 'operation')} completed", **self._fields(context, **kwargs))

    def log_error(self, context: Dict[str, Any], error: Exception, **kwargs: Any):
        self.logger.error(
            f"{context.get('event', 'operation')} failed",
            **self._fields(context, error=str(error), error_type=type(error).__name__, **kwargs),
        )
