"""
Exception hierarchy for the card scanner core.

Scanning is meant to degrade gracefully: unreadable OCR text yields a low
confidence score and lookup failures are retried on a later frame. The
exceptions below cover the places where callers do need to react.
"""

from typing import Any, Dict, Optional


class CardScanError(Exception):
    """Base exception class for all card scanner errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CardScanError):
    """Raised when there are configuration or environment variable issues."""
    pass


class CatalogLookupError(CardScanError):
    """Raised when a catalog index cannot answer a search."""
    pass


class NetworkError(CatalogLookupError):
    """Raised when a remote catalog request fails at the transport level."""
    pass


class LedgerError(CardScanError):
    """Raised when ledger events are malformed or cannot be folded."""
    pass


class StoreError(CardScanError):
    """Raised when reading or writing a persisted event log fails."""
    pass
