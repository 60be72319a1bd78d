"""Canonicalization and confidence scoring for raw OCR text."""

from typing import Optional

from ..core.constants import (
    CONF_MAX,
    CONF_NAME_LONG,
    CONF_NAME_LONG_LEN,
    CONF_NAME_MIN,
    CONF_NAME_MIN_LEN,
    CONF_NUMBER_MALFORMED,
    CONF_NUMBER_WELL_FORMED,
    CONF_SET_CODE,
)
from ..core.types import NormalizedReading, OcrReading
from .regexes import (
    CHAR_CONFUSIONS,
    COLLECTOR_NUMBER_SHAPE,
    DASHES,
    DOUBLE_QUOTES,
    NON_ALNUM_UPPER,
    NON_COLLECTOR_CHARS,
    NON_PRINTABLE_ASCII,
    SET_CODE_SHAPE,
    SINGLE_QUOTES,
    SPACE_RUN,
    WHITESPACE_RUN,
)


def normalize_name(raw: str) -> str:
    """
    Canonical form of an OCR'd card name.

    Total and idempotent: the result holds printable ASCII only, with
    single spaces and no leading or trailing whitespace.

    Examples:
        >>> normalize_name("  Jace,\\u2019s   Erasure\\u2014 ")
        "Jace,'s Erasure-"
    """
    if not raw:
        return ""

    text = SINGLE_QUOTES.sub("'", raw)
    text = DOUBLE_QUOTES.sub('"', text)
    text = DASHES.sub("-", text)
    text = WHITESPACE_RUN.sub(" ", text)
    # Stripping can leave neighbouring spaces behind, so collapse again after.
    text = NON_PRINTABLE_ASCII.sub("", text)
    return SPACE_RUN.sub(" ", text).strip()


def normalize_collector_number(raw: str) -> str:
    """
    Uppercase, undo letter/digit OCR confusions, keep only A-Z, 0-9 and '/'.

    Examples:
        >>> normalize_collector_number(" i2o ")
        '120'
        >>> normalize_collector_number("B12/ 350")
        '812/350'
    """
    if not raw:
        return ""

    text = raw.strip().upper()
    for pattern, replacement in CHAR_CONFUSIONS:
        text = pattern.sub(replacement, text)
    return NON_COLLECTOR_CHARS.sub("", text)


def normalize_set_code(raw: str) -> str:
    if not raw:
        return ""
    return NON_ALNUM_UPPER.sub("", raw.strip().upper())


def confidence(
    raw_name: str,
    raw_collector_number: Optional[str] = None,
    raw_set_code: Optional[str] = None,
) -> int:
    """
    Estimate how reliable an OCR attempt is, independent of catalog matching.

    Additive and capped at 100:
      - name of at least 3 characters: +40, at least 6: +10 more
      - collector number shaped like digits with an optional letter: +30,
        present but malformed: +15
      - set code of 2-5 alphanumerics: +20
    """
    score = 0

    name = normalize_name(raw_name)
    if len(name) >= CONF_NAME_MIN_LEN:
        score += CONF_NAME_MIN
    if len(name) >= CONF_NAME_LONG_LEN:
        score += CONF_NAME_LONG

    if raw_collector_number:
        number = normalize_collector_number(raw_collector_number)
        if COLLECTOR_NUMBER_SHAPE.match(number):
            score += CONF_NUMBER_WELL_FORMED
        elif number:
            score += CONF_NUMBER_MALFORMED

    if raw_set_code and SET_CODE_SHAPE.match(normalize_set_code(raw_set_code)):
        score += CONF_SET_CODE

    return min(score, CONF_MAX)


def normalize_reading(reading: OcrReading) -> NormalizedReading:
    """Normalize every field of one OCR attempt and score it."""
    number = (
        normalize_collector_number(reading.collector_number_raw)
        if reading.collector_number_raw
        else None
    )
    set_code = normalize_set_code(reading.set_code_raw) if reading.set_code_raw else None

    return NormalizedReading(
        name=normalize_name(reading.name_raw),
        confidence=confidence(
            reading.name_raw, reading.collector_number_raw, reading.set_code_raw
        ),
        collector_number=number or None,
        set_code=set_code or None,
    )
