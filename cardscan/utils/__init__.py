"""Utilities package."""

from .config import ensure_ledger_dir, settings
from .log import LoggerMixin, bind_scan_context, clear_scan_context, configure_logging, get_logger

__all__ = [
    "settings",
    "ensure_ledger_dir",
    "get_logger",
    "LoggerMixin",
    "configure_logging",
    "bind_scan_context",
    "clear_scan_context",
]
