"""
Candidate scoring of catalog entries against a normalized query.
"""

import math
from typing import Optional

from rapidfuzz.distance import Levenshtein

from ..core.constants import (
    EDIT_DISTANCE_MAX_LEN,
    FUZZY_FAR_DISTANCE,
    FUZZY_NEAR_DISTANCE,
    SCORE_COLLECTOR_NUMBER,
    SCORE_NAME_EXACT,
    SCORE_NAME_FUZZY_BASE,
    SCORE_NAME_FUZZY_FAR,
    SCORE_NAME_FUZZY_STEP,
    SCORE_NAME_PREFIX,
    SCORE_NAME_SUBSTRING,
    SCORE_SET_CODE,
)
from ..core.types import CatalogEntry


def bounded_edit_distance(a: str, b: str, cutoff: Optional[int] = None) -> float:
    """Levenshtein distance between two strings.

    Args:
        a: First string
        b: Second string
        cutoff: Distances above this are reported as ``cutoff + 1``

    Returns:
        The edit distance, or ``math.inf`` when either input is longer
        than 40 characters
    """
    if len(a) > EDIT_DISTANCE_MAX_LEN or len(b) > EDIT_DISTANCE_MAX_LEN:
        return math.inf
    return Levenshtein.distance(a, b, score_cutoff=cutoff)


def name_score(query_lower: str, entry_name: str) -> int:
    """Score a lowercased query name against one entry name.

    Args:
        query_lower: Normalized, lowercased query name (non-empty)
        entry_name: Catalog entry display name

    Returns:
        60 exact, 40 prefix, 25 substring, else 35 - 10*d for d <= 2,
        10 for d <= 4, otherwise 0
    """
    candidate = entry_name.lower()
    if candidate == query_lower:
        return SCORE_NAME_EXACT
    if candidate.startswith(query_lower):
        return SCORE_NAME_PREFIX
    if query_lower in candidate:
        return SCORE_NAME_SUBSTRING

    distance = bounded_edit_distance(query_lower, candidate, cutoff=FUZZY_FAR_DISTANCE)
    if distance <= FUZZY_NEAR_DISTANCE:
        return SCORE_NAME_FUZZY_BASE - SCORE_NAME_FUZZY_STEP * int(distance)
    if distance <= FUZZY_FAR_DISTANCE:
        return SCORE_NAME_FUZZY_FAR
    return 0


def score_entry(
    entry: CatalogEntry,
    name: Optional[str] = None,
    collector_number: Optional[str] = None,
    set_code: Optional[str] = None,
) -> int:
    """Additive match score of one entry.

    Expects already-normalized query fields; ``name`` lowercased.
    """
    score = 0
    if name:
        score += name_score(name, entry.name)
    if collector_number and entry.collector_number.upper() == collector_number:
        score += SCORE_COLLECTOR_NUMBER
    if set_code and entry.set_code.upper() == set_code:
        score += SCORE_SET_CODE
    return score
