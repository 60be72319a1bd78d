"""Identification pipeline: normalize an OCR reading, then rank candidates."""

import inspect
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Sequence, Union

from ..core.constants import (
    AUTO_CONFIRM_THRESHOLD,
    DISAMBIGUATION_MARGIN,
    MIN_CANDIDATE_SCORE,
    SEARCH_LIMIT,
)
from ..core.types import IdentificationResult, NormalizedReading, OcrReading, ScanCandidate
from ..match.index import AsyncCatalogIndex, CatalogIndex
from ..ocr.normalize import confidence, normalize_reading
from ..utils.log import get_logger

logger = get_logger(__name__)

Lookup = Callable[[str], Awaitable[IdentificationResult]]


def _search_kwargs(normalized: NormalizedReading, limit: int) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"limit": limit}
    if normalized.name:
        kwargs["name"] = normalized.name
    if normalized.collector_number:
        kwargs["collector_number"] = normalized.collector_number
    if normalized.set_code:
        kwargs["set_code"] = normalized.set_code
    return kwargs


def is_auto_confirmed(
    candidates: Sequence[ScanCandidate],
    threshold: int = AUTO_CONFIRM_THRESHOLD,
    margin: int = DISAMBIGUATION_MARGIN,
) -> bool:
    """Top candidate is trusted without review when high and unambiguous."""
    if not candidates:
        return False
    top = candidates[0]
    if top.score < threshold:
        return False
    return len(candidates) < 2 or candidates[1].score < top.score - margin


def _build_result(
    normalized: NormalizedReading,
    candidates: Sequence[ScanCandidate],
    auto_confirm_threshold: int,
    disambiguation_margin: int,
    min_candidate_score: int,
) -> IdentificationResult:
    auto_confirmed = is_auto_confirmed(candidates, auto_confirm_threshold, disambiguation_margin)
    viable = tuple(c for c in candidates if c.score >= min_candidate_score)

    logger.info(
        "Identification completed",
        name=normalized.name,
        ocr_confidence=normalized.confidence,
        candidates=len(viable),
        top_score=viable[0].score if viable else None,
        auto_confirmed=auto_confirmed,
    )
    return IdentificationResult(
        normalized=normalized, candidates=viable, auto_confirmed=auto_confirmed
    )


def identify(
    reading: OcrReading,
    index: CatalogIndex,
    *,
    auto_confirm_threshold: int = AUTO_CONFIRM_THRESHOLD,
    disambiguation_margin: int = DISAMBIGUATION_MARGIN,
    min_candidate_score: int = MIN_CANDIDATE_SCORE,
    search_limit: int = SEARCH_LIMIT,
) -> IdentificationResult:
    """
    Resolve one OCR reading to ranked catalog candidates.

    Args:
        reading: Raw OCR fields for one attempt
        index: Catalog index to search
        auto_confirm_threshold: Minimum top score for auto-confirmation
        disambiguation_margin: Runner-up must trail the top by more than this
        min_candidate_score: Candidates below this are not surfaced
        search_limit: Maximum candidates requested from the index

    Returns:
        IdentificationResult with the normalized reading, surfaced
        candidates and the auto-confirm decision

    Raises:
        Whatever the index raises; lookup failures are the caller's to handle.
    """
    normalized = normalize_reading(reading)
    candidates = index.search(**_search_kwargs(normalized, search_limit))
    return _build_result(
        normalized, candidates, auto_confirm_threshold, disambiguation_margin, min_candidate_score
    )


async def identify_async(
    reading: OcrReading,
    index: Union[AsyncCatalogIndex, CatalogIndex],
    *,
    auto_confirm_threshold: int = AUTO_CONFIRM_THRESHOLD,
    disambiguation_margin: int = DISAMBIGUATION_MARGIN,
    min_candidate_score: int = MIN_CANDIDATE_SCORE,
    search_limit: int = SEARCH_LIMIT,
) -> IdentificationResult:
    """Same as identify() for indexes whose search may suspend."""
    normalized = normalize_reading(reading)
    candidates = index.search(**_search_kwargs(normalized, search_limit))
    if inspect.isawaitable(candidates):
        candidates = await candidates
    return _build_result(
        normalized, candidates, auto_confirm_threshold, disambiguation_margin, min_candidate_score
    )


def make_lookup(index: Union[AsyncCatalogIndex, CatalogIndex], **policy: int) -> Lookup:
    """Adapt an index into the name -> result coroutine a ScanSession calls."""

    async def lookup(name: str) -> IdentificationResult:
        return await identify_async(OcrReading(name_raw=name), index, **policy)

    return lookup


def select_best_frame(readings: Iterable[OcrReading]) -> Optional[OcrReading]:
    """Reading with the highest OCR confidence; the earliest wins ties."""
    best: Optional[OcrReading] = None
    best_score = -1
    for reading in readings:
        score = confidence(
            reading.name_raw, reading.collector_number_raw, reading.set_code_raw
        )
        if score > best_score:
            best, best_score = reading, score
    return best
