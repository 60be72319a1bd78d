"""OCR text normalization package."""

from .normalize import (
    confidence,
    normalize_collector_number,
    normalize_name,
    normalize_reading,
    normalize_set_code,
)
from .regexes import COLLECTOR_NUMBER_SHAPE, SET_CODE_SHAPE, extract_card_name

__all__ = [
    "normalize_name",
    "normalize_collector_number",
    "normalize_set_code",
    "normalize_reading",
    "confidence",
    "extract_card_name",
    "COLLECTOR_NUMBER_SHAPE",
    "SET_CODE_SHAPE",
]
