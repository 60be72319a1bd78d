"""Append-only event log with id-based de-duplication."""

from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from ..utils.log import LoggerMixin
from .events import LedgerEvent
from .holdings import Holdings, materialize, order_events


class EventLog(LoggerMixin):
    """In-memory ledger for one owner.

    Several devices append independently; their logs merge by timestamp and
    an event id already recorded is a no-op, so retried sync pushes never
    double count.
    """

    def __init__(self, events: Iterable[LedgerEvent] = ()):
        self._events: List[LedgerEvent] = []
        self._ids: Set[str] = set()
        for event in events:
            self.append(event)

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._ids

    def __iter__(self) -> Iterator[LedgerEvent]:
        return iter(self.events())

    def append(self, event: LedgerEvent) -> bool:
        """Record an event.

        Returns:
            True if recorded, False if its id was already in the log
        """
        if event.id in self._ids:
            self.logger.debug("Duplicate ledger event ignored", event_id=event.id)
            return False
        self._ids.add(event.id)
        self._events.append(event)
        return True

    def extend(self, events: Iterable[LedgerEvent]) -> int:
        """Merge a batch, e.g. a sync push or pull. Returns how many were new."""
        added = sum(1 for event in events if self.append(event))
        self.logger.info("Ledger events merged", added=added, total=len(self._events))
        return added

    def events(self) -> List[LedgerEvent]:
        """All events, ascending timestamp, ties in insertion order."""
        return order_events(self._events)

    def pull_since(self, since: Optional[datetime] = None) -> Tuple[List[LedgerEvent], Optional[datetime]]:
        """Events strictly after ``since`` in fold order, plus the newest timestamp.

        Args:
            since: Exclusive lower bound; None returns the whole log. A naive
                value is taken as UTC, like event timestamps

        Returns:
            Tuple of (events, latest_at) where latest_at is None for an empty result
        """
        ordered = self.events()
        if since is not None:
            if since.tzinfo is None:
                since = since.replace(tzinfo=timezone.utc)
            ordered = [e for e in ordered if e.at > since]
        latest_at = ordered[-1].at if ordered else None
        return ordered, latest_at

    def materialize(self) -> Holdings:
        return materialize(self._events)
