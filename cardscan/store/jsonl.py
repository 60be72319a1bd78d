"""JSON Lines file holding a ledger event log, one event per line."""

import json
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..ledger.events import LedgerEvent, dump_event, parse_event
from ..ledger.log import EventLog
from ..utils.config import ensure_ledger_dir
from ..utils.error_handler import LedgerError, StoreError
from ..utils.log import get_logger


class JsonlEventStore:
    """Append-only event file; reading it back feeds an EventLog."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.logger = get_logger(__name__)
        self.path = ensure_ledger_dir(str(path) if path else None)

    def read(self) -> List[LedgerEvent]:
        """Parse every event in the file; a missing file is an empty log.

        Raises:
            StoreError: If a line is not valid JSON or not a valid event
        """
        if not self.path.exists():
            return []

        events = []
        with open(self.path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(parse_event(json.loads(line)))
                except (json.JSONDecodeError, LedgerError) as e:
                    raise StoreError(
                        f"Bad ledger line {line_no} in {self.path}",
                        details={"line": line_no, "error": str(e)},
                    ) from e

        self.logger.debug("Ledger file read", path=str(self.path), events=len(events))
        return events

    def load(self) -> EventLog:
        return EventLog(self.read())

    def append(self, events: Iterable[LedgerEvent]) -> int:
        """Append events whose ids are not yet in the file. Returns how many were written."""
        known = {e.id for e in self.read()}
        fresh = []
        for event in events:
            if event.id not in known:
                known.add(event.id)
                fresh.append(event)

        if not fresh:
            return 0

        with open(self.path, "a", encoding="utf-8") as f:
            for event in fresh:
                f.write(json.dumps(dump_event(event), separators=(",", ":")) + "\n")
            f.flush()
            os.fsync(f.fileno())

        self.logger.info("Ledger events written", path=str(self.path), written=len(fresh))
        return len(fresh)
