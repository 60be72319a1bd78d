"""Materialization of the ledger into per-variant holdings.

Holdings are never stored or patched in place: they are recomputed by
folding the full ordered event log of one owner. Folding a prefix and then
feeding the result as ``initial`` while folding the rest gives the same
holdings as folding everything at once.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from ..core.types import VariantId
from ..utils.error_handler import LedgerError
from .events import (
    AddEvent,
    CardLocation,
    Condition,
    LedgerEvent,
    MoveEvent,
    RemoveEvent,
    SetConditionEvent,
    SetLanguageEvent,
    SetNoteEvent,
)


@dataclass(frozen=True)
class LocationQuantity:
    location: CardLocation
    quantity: int


@dataclass(frozen=True)
class VariantHoldings:
    variant_id: VariantId
    # Negative only while the log is incomplete, e.g. a remove synced before its add
    total_quantity: int = 0
    by_location: Tuple[LocationQuantity, ...] = ()
    last_condition: Optional[Condition] = None
    last_language: Optional[str] = None
    last_note: Optional[str] = None
    # Ids of the events folded into this entry; a resumed fold skips them
    event_ids: FrozenSet[str] = field(default=frozenset(), repr=False)

    @property
    def display_quantity(self) -> int:
        """Quantity to show to a user; raw totals below zero read as none owned."""
        return max(self.total_quantity, 0)

    @property
    def is_consistent(self) -> bool:
        return self.total_quantity >= 0 and all(lq.quantity >= 0 for lq in self.by_location)

    def quantity_at(self, location: CardLocation) -> int:
        for lq in self.by_location:
            if _same_location(lq.location, location):
                return lq.quantity
        return 0


Holdings = Dict[VariantId, VariantHoldings]


def _same_location(a: CardLocation, b: CardLocation) -> bool:
    return a.kind == b.kind and a.name == b.name


@dataclass
class _Accumulator:
    variant_id: VariantId
    total_quantity: int = 0
    by_location: List[LocationQuantity] = field(default_factory=list)
    last_condition: Optional[Condition] = None
    last_language: Optional[str] = None
    last_note: Optional[str] = None
    event_ids: Set[str] = field(default_factory=set)

    @classmethod
    def from_holdings(cls, h: VariantHoldings) -> "_Accumulator":
        return cls(
            variant_id=h.variant_id,
            total_quantity=h.total_quantity,
            by_location=list(h.by_location),
            last_condition=h.last_condition,
            last_language=h.last_language,
            last_note=h.last_note,
            event_ids=set(h.event_ids),
        )

    def shift(self, location: Optional[CardLocation], delta: int) -> None:
        """Apply delta at a location. An unknown location starts at zero."""
        if location is None:
            return
        for i, lq in enumerate(self.by_location):
            if _same_location(lq.location, location):
                self.by_location[i] = LocationQuantity(location, lq.quantity + delta)
                break
        else:
            self.by_location.append(LocationQuantity(location, delta))
        self.by_location = [lq for lq in self.by_location if lq.quantity != 0]

    def apply(self, event: LedgerEvent) -> None:
        match event:
            case AddEvent():
                self.total_quantity += event.quantity
                self.shift(event.location, event.quantity)
                if event.condition is not None:
                    self.last_condition = event.condition
                if event.language:
                    self.last_language = event.language
            case RemoveEvent():
                self.total_quantity -= event.quantity
                self.shift(event.location, -event.quantity)
            case MoveEvent():
                self.shift(event.from_location, -event.quantity)
                self.shift(event.to_location, event.quantity)
            case SetConditionEvent():
                self.last_condition = event.condition
            case SetLanguageEvent():
                self.last_language = event.language
            case SetNoteEvent():
                self.last_note = event.note
            case _:
                raise LedgerError(
                    "Unknown ledger event type",
                    details={"type": type(event).__name__, "id": getattr(event, "id", None)},
                )

    def freeze(self) -> VariantHoldings:
        return VariantHoldings(
            variant_id=self.variant_id,
            total_quantity=self.total_quantity,
            by_location=tuple(self.by_location),
            last_condition=self.last_condition,
            last_language=self.last_language,
            last_note=self.last_note,
            event_ids=frozenset(self.event_ids),
        )


def order_events(events: Iterable[LedgerEvent]) -> List[LedgerEvent]:
    """Ascending timestamp; equal timestamps keep their given order."""
    return sorted(events, key=lambda e: e.at)


def fold(
    events: Iterable[LedgerEvent], initial: Optional[Mapping[VariantId, VariantHoldings]] = None
) -> Holdings:
    """Fold events onto ``initial`` holdings without modifying it.

    Events are ordered by timestamp first. An id already folded, in this
    call or into ``initial``, is skipped, so redelivered events never count
    twice and a fold resumed from a prefix matches a fold of the whole log.
    """
    accumulators: Dict[VariantId, _Accumulator] = {
        variant_id: _Accumulator.from_holdings(h) for variant_id, h in (initial or {}).items()
    }
    seen_ids: Set[str] = set()
    for acc in accumulators.values():
        seen_ids.update(acc.event_ids)

    for event in order_events(events):
        if event.id in seen_ids:
            continue
        seen_ids.add(event.id)

        variant_id = VariantId(event.variant_id)
        acc = accumulators.get(variant_id)
        if acc is None:
            acc = accumulators[variant_id] = _Accumulator(variant_id)
        acc.apply(event)
        acc.event_ids.add(event.id)

    return {variant_id: acc.freeze() for variant_id, acc in accumulators.items()}


def materialize(events: Iterable[LedgerEvent]) -> Holdings:
    """Current holdings per variant from a full event log."""
    return fold(events)
