"""Ledger event models.

Events are the system of record for collection changes. They are frozen,
never mutated or deleted; corrections are new events. On the wire they are
camelCase JSON objects discriminated by ``type``.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..core.types import ScanCandidate, VariantId
from ..utils.error_handler import LedgerError


class Condition(str, Enum):
    MINT = "mint"
    NEAR_MINT = "near_mint"
    LIGHTLY_PLAYED = "lightly_played"
    MODERATELY_PLAYED = "moderately_played"
    HEAVILY_PLAYED = "heavily_played"
    DAMAGED = "damaged"


class CardLocation(BaseModel):
    """Where copies are kept. Two locations are the same iff kind and name match."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["binder", "box", "deck", "other"]
    name: str


class _EventBase(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    id: str = Field(min_length=1)
    at: datetime
    variant_id: str = Field(min_length=1)

    @field_validator("at", mode="after")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC so all events stay comparable."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class AddEvent(_EventBase):
    type: Literal["add"] = "add"
    quantity: int = Field(gt=0)
    condition: Optional[Condition] = None
    language: Optional[str] = None
    is_foil: Optional[bool] = None
    location: Optional[CardLocation] = None


class RemoveEvent(_EventBase):
    type: Literal["remove"] = "remove"
    quantity: int = Field(gt=0)
    location: Optional[CardLocation] = None


class MoveEvent(_EventBase):
    type: Literal["move"] = "move"
    quantity: int = Field(gt=0)
    from_location: Optional[CardLocation] = Field(default=None, alias="from")
    to_location: Optional[CardLocation] = Field(default=None, alias="to")


class SetConditionEvent(_EventBase):
    type: Literal["set_condition"] = "set_condition"
    condition: Condition


class SetLanguageEvent(_EventBase):
    type: Literal["set_language"] = "set_language"
    language: str = Field(min_length=1)


class SetNoteEvent(_EventBase):
    type: Literal["set_note"] = "set_note"
    note: str


LedgerEvent = Annotated[
    Union[AddEvent, RemoveEvent, MoveEvent, SetConditionEvent, SetLanguageEvent, SetNoteEvent],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter = TypeAdapter(LedgerEvent)


def new_event_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_event(data: Dict[str, Any]) -> LedgerEvent:
    """Validate one wire-format event.

    Raises:
        LedgerError: If the payload is not a valid event
    """
    try:
        return _event_adapter.validate_python(data)
    except ValidationError as e:
        raise LedgerError(
            "Invalid ledger event",
            details={"event_id": data.get("id") if isinstance(data, dict) else None,
                     "errors": e.errors(include_url=False)},
        ) from e


def parse_events(items: Iterable[Dict[str, Any]]) -> List[LedgerEvent]:
    return [parse_event(item) for item in items]


def dump_event(event: LedgerEvent) -> Dict[str, Any]:
    """Wire-format (camelCase, JSON-safe) representation of an event."""
    return event.model_dump(mode="json", by_alias=True, exclude_none=True)


def add_event_for(
    candidate: ScanCandidate,
    quantity: int = 1,
    *,
    condition: Optional[Condition] = None,
    language: Optional[str] = None,
    is_foil: Optional[bool] = None,
    location: Optional[CardLocation] = None,
    at: Optional[datetime] = None,
) -> AddEvent:
    """Turn a confirmed candidate into an add event with a fresh id."""
    return AddEvent(
        id=new_event_id(),
        at=at or utc_now(),
        variant_id=VariantId(candidate.entry_id),
        quantity=quantity,
        condition=condition,
        language=language,
        is_foil=is_foil,
        location=location,
    )
