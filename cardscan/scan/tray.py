"""Pending confirmations between identification and the ledger."""

import time
from dataclasses import dataclass, replace
from typing import List, Optional

from ..core.types import ScanCandidate
from ..ledger.events import AddEvent, CardLocation, add_event_for
from ..utils.error_handler import LedgerError
from ..utils.log import get_logger


@dataclass(frozen=True)
class PendingScan:
    key: str
    candidate: ScanCandidate
    quantity: int = 1
    committed: bool = False


class ScanTray:
    """Confirmed candidates waiting to be written to the ledger, newest first."""

    def __init__(self):
        self.logger = get_logger(__name__)
        self.pending: List[PendingScan] = []

    def _find(self, key: str) -> Optional[int]:
        for i, p in enumerate(self.pending):
            if p.key == key:
                return i
        return None

    def add_pending(self, candidate: ScanCandidate) -> PendingScan:
        """Queue a candidate; the same variant still uncommitted just gains a copy."""
        for i, p in enumerate(self.pending):
            if p.candidate.entry_id == candidate.entry_id and not p.committed:
                self.pending[i] = replace(p, quantity=p.quantity + 1)
                return self.pending[i]

        entry = PendingScan(key=f"{candidate.entry_id}-{time.time_ns()}", candidate=candidate)
        self.pending.insert(0, entry)
        return entry

    def increment(self, key: str) -> None:
        i = self._find(key)
        if i is not None:
            self.pending[i] = replace(self.pending[i], quantity=self.pending[i].quantity + 1)

    def decrement(self, key: str) -> None:
        i = self._find(key)
        if i is None:
            return
        quantity = self.pending[i].quantity - 1
        if quantity > 0:
            self.pending[i] = replace(self.pending[i], quantity=quantity)
        else:
            del self.pending[i]

    def commit(self, key: str, location: Optional[CardLocation] = None) -> AddEvent:
        """Mark an entry committed and build the add event to append to the ledger.

        Raises:
            LedgerError: If the key is unknown or was already committed
        """
        i = self._find(key)
        if i is None or self.pending[i].committed:
            raise LedgerError("No uncommitted pending scan", details={"key": key})

        entry = self.pending[i]
        event = add_event_for(entry.candidate, entry.quantity, location=location)
        self.pending[i] = replace(entry, committed=True)
        self.logger.info(
            "Pending scan committed",
            variant_id=entry.candidate.entry_id,
            quantity=entry.quantity,
            event_id=event.id,
        )
        return event

    def clear_committed(self) -> None:
        self.pending = [p for p in self.pending if not p.committed]
