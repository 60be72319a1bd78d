"""
Catalog index contract and the reference in-memory implementation.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union, runtime_checkable

from ..core.constants import SEARCH_LIMIT
from ..core.types import CardId, CatalogEntry, PrintingId, ScanCandidate, VariantId
from ..ocr.normalize import normalize_collector_number, normalize_name, normalize_set_code
from ..utils.error_handler import CatalogLookupError
from ..utils.log import LoggerMixin
from .score import score_entry


@runtime_checkable
class CatalogIndex(Protocol):
    """Ranks catalog entries against a query, best first."""

    def search(
        self,
        name: Optional[str] = None,
        collector_number: Optional[str] = None,
        set_code: Optional[str] = None,
        limit: int = SEARCH_LIMIT,
    ) -> List[ScanCandidate]:
        ...


@runtime_checkable
class AsyncCatalogIndex(Protocol):
    """Same contract as CatalogIndex for indexes backed by I/O."""

    async def search(
        self,
        name: Optional[str] = None,
        collector_number: Optional[str] = None,
        set_code: Optional[str] = None,
        limit: int = SEARCH_LIMIT,
    ) -> List[ScanCandidate]:
        ...


def entry_from_dict(data: Dict[str, Any]) -> CatalogEntry:
    """Build a CatalogEntry from a catalog record.

    Accepts both the snake_case field names and the camelCase ones used
    on the wire (``variantId``, ``setId``, ``collectorNumber``...).
    """
    try:
        entry_id = data.get("entry_id") or data.get("variantId") or data["id"]
        set_code = data.get("set_code") or data.get("setCode") or data.get("setId") or ""
        number = data.get("collector_number") or data.get("collectorNumber") or ""
        card_id = data.get("card_id") or data.get("cardId")
        printing_id = data.get("printing_id") or data.get("printingId")
        return CatalogEntry(
            entry_id=VariantId(str(entry_id)),
            name=str(data["name"]),
            set_code=str(set_code),
            collector_number=str(number),
            card_id=CardId(card_id) if card_id else None,
            printing_id=PrintingId(printing_id) if printing_id else None,
            image_uri=data.get("image_uri") or data.get("imageUri"),
        )
    except KeyError as e:
        raise CatalogLookupError(
            f"Catalog record is missing field {e.args[0]!r}",
            details={"record": data},
        ) from e


class InMemoryCatalogIndex(LoggerMixin):
    """Scores every entry of an in-memory pool per query.

    Fine for client-side catalogs in the tens of thousands of entries; a
    trigram or prefix index can replace it behind the same contract.
    """

    def __init__(self, entries: Iterable[CatalogEntry]):
        self.entries: List[CatalogEntry] = list(entries)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "InMemoryCatalogIndex":
        return cls(entry_from_dict(r) for r in records)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryCatalogIndex":
        """Load a catalog from a JSON list (or ``{"data": [...]}``) file."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogLookupError(
                f"Cannot load catalog from {path}", details={"error": str(e)}
            ) from e

        records = payload.get("data", []) if isinstance(payload, dict) else payload
        index = cls.from_records(records)
        index.logger.info("Catalog loaded", path=str(path), entries=len(index))
        return index

    def search(
        self,
        name: Optional[str] = None,
        collector_number: Optional[str] = None,
        set_code: Optional[str] = None,
        limit: int = SEARCH_LIMIT,
    ) -> List[ScanCandidate]:
        """Rank entries by descending score; ties keep catalog order."""
        query_name = normalize_name(name).lower() if name else None
        query_number = normalize_collector_number(collector_number) if collector_number else None
        query_set = normalize_set_code(set_code) if set_code else None

        scored = []
        for entry in self.entries:
            score = score_entry(entry, query_name, query_number, query_set)
            if score > 0:
                scored.append(ScanCandidate(entry=entry, score=score))

        # sorted() is stable, which is the documented tie-break
        ranked = sorted(scored, key=lambda c: c.score, reverse=True)[: max(limit, 0)]

        self.logger.debug(
            "Catalog search completed",
            name=query_name,
            collector_number=query_number,
            set_code=query_set,
            matched=len(scored),
            returned=len(ranked),
        )
        return ranked
