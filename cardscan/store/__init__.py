"""Storage adapters for ledger event logs."""

from .jsonl import JsonlEventStore

__all__ = ["JsonlEventStore"]
