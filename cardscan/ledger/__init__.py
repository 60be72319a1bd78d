"""Event-sourced collection ledger."""

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
    add_event_for,
    dump_event,
    new_event_id,
    parse_event,
    parse_events,
)
from .holdings import LocationQuantity, VariantHoldings, fold, materialize
from .log import EventLog
from .valuation import CollectionValue, Money, PriceRecord, compute_collection_value

__all__ = [
    "AddEvent",
    "RemoveEvent",
    "MoveEvent",
    "SetConditionEvent",
    "SetLanguageEvent",
    "SetNoteEvent",
    "LedgerEvent",
    "CardLocation",
    "Condition",
    "add_event_for",
    "dump_event",
    "new_event_id",
    "parse_event",
    "parse_events",
    "LocationQuantity",
    "VariantHoldings",
    "fold",
    "materialize",
    "EventLog",
    "CollectionValue",
    "Money",
    "PriceRecord",
    "compute_collection_value",
]
