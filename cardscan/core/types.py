from dataclasses import dataclass, field
from typing import NewType, Optional, Tuple

CatalogEntryId = NewType("CatalogEntryId", str)
CardId = NewType("CardId", str)
PrintingId = NewType("PrintingId", str)
VariantId = NewType("VariantId", str)


@dataclass(frozen=True)
class CatalogEntry:
    """A specific printing/variant of a card in the reference catalog."""
    entry_id: VariantId
    name: str
    set_code: str
    collector_number: str
    card_id: Optional[CardId] = None
    printing_id: Optional[PrintingId] = None
    image_uri: Optional[str] = None


@dataclass(frozen=True)
class ScanCandidate:
    entry: CatalogEntry
    score: int

    @property
    def entry_id(self) -> VariantId:
        return self.entry.entry_id

    @property
    def name(self) -> str:
        return self.entry.name


@dataclass(frozen=True)
class OcrReading:
    """Raw text of one OCR attempt, as handed over by the frame source."""
    name_raw: str
    collector_number_raw: Optional[str] = None
    set_code_raw: Optional[str] = None
    platform_confidence: Optional[float] = None


@dataclass(frozen=True)
class NormalizedReading:
    name: str
    confidence: int
    collector_number: Optional[str] = None
    set_code: Optional[str] = None


@dataclass(frozen=True)
class IdentificationResult:
    normalized: NormalizedReading
    candidates: Tuple[ScanCandidate, ...] = field(default_factory=tuple)
    auto_confirmed: bool = False

    @property
    def top(self) -> Optional[ScanCandidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def found(self) -> bool:
        return bool(self.candidates)
