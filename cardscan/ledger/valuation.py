"""Collection value from holdings and externally supplied prices."""

from dataclasses import dataclass, field
from typing import Iterable, List, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.types import VariantId
from .holdings import VariantHoldings

PriceKind = Literal["market", "low", "mid", "high"]


class Money(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float
    currency: str


class PriceRecord(BaseModel):
    """One cached price point for a variant on a market."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    variant_id: str
    market: str
    kind: PriceKind
    value: Money
    updated_at: str = ""


@dataclass(frozen=True)
class CollectionValue:
    total: Money
    missing_prices: List[VariantId] = field(default_factory=list)


def compute_collection_value(
    holdings: Iterable[VariantHoldings],
    prices: Iterable[PriceRecord],
    market: str,
    kind: PriceKind,
    currency: str,
) -> CollectionValue:
    """
    Value holdings at the given market price.

    Only prices matching market, kind and currency are used; for a variant
    listed twice the last record wins. Holdings with a total of zero or
    below contribute nothing, and variants owned without a matching price
    are reported in ``missing_prices``.
    """
    unit_prices = {}
    for p in prices:
        if p.market != market or p.kind != kind or p.value.currency != currency:
            continue
        unit_prices[p.variant_id] = p.value.amount

    total = 0.0
    missing: List[VariantId] = []
    for h in holdings:
        quantity = h.display_quantity
        unit = unit_prices.get(h.variant_id)
        if unit is None:
            if quantity > 0:
                missing.append(h.variant_id)
            continue
        total += unit * quantity

    return CollectionValue(total=Money(amount=total, currency=currency), missing_prices=missing)
