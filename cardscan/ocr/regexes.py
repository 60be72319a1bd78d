"""Regex patterns for card text extraction and OCR cleanup."""

import re
from typing import List, Optional, Pattern, Tuple

from ..core.constants import MAX_NAME_LEN, MIN_NAME_LEN

# Letter/digit look-alikes, applied in order to an uppercased collector
# number. Each rule only fires next to a digit so genuine letters survive.
CHAR_CONFUSIONS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"O(?=\d)"), "0"),
    (re.compile(r"(?<=\d)O"), "0"),
    (re.compile(r"I(?=\d)"), "1"),
    (re.compile(r"(?<=\d)I"), "1"),
    (re.compile(r"l(?=\d)"), "1"),
    (re.compile(r"(?<=\d)l"), "1"),
    (re.compile(r"S(?=\d{2})"), "5"),
    (re.compile(r"(?<=\d)S"), "5"),
    (re.compile(r"B(?=\d{2})"), "8"),
]

# Typographic punctuation mapped to ASCII
SINGLE_QUOTES = re.compile("[‘’`]")
DOUBLE_QUOTES = re.compile("[“”]")
DASHES = re.compile("[–—]")

WHITESPACE_RUN = re.compile(r"\s+")
SPACE_RUN = re.compile(r" {2,}")
NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7E]")
NON_COLLECTOR_CHARS = re.compile(r"[^A-Z0-9/]")
NON_ALNUM_UPPER = re.compile(r"[^A-Z0-9]")

# Shapes used for OCR confidence
COLLECTOR_NUMBER_SHAPE = re.compile(r"^\d+[A-Z]?$")
SET_CODE_SHAPE = re.compile(r"^[A-Z0-9]{2,5}$")

# Frame text heuristics
NAME_LINE_PATTERN = re.compile(r"^[A-Za-z][A-Za-z ',\-]*$")
TYPE_LINE_WORDS = re.compile(
    r"^(Instant|Sorcery|Artifact|Enchantment|Land|Creature|Planeswalker|Battle)$",
    re.IGNORECASE,
)
POWER_TOUGHNESS_PATTERN = re.compile(r"^\d+/\d+$")


def extract_card_name(raw_text: str) -> Optional[str]:
    """
    Pick the line of a frame's OCR output most likely to be the card name.

    Card names sit at the top of the card, so the first line that looks
    like a name wins: letters, spaces, apostrophes, commas and hyphens,
    starting with a letter, within length bounds, and not a bare type word.

    Examples:
        >>> extract_card_name("Lightning Bolt\\n{R}\\nInstant")
        'Lightning Bolt'
        >>> extract_card_name("2/2\\n12") is None
        True
    """
    if not raw_text:
        return None

    for line in (part.strip() for part in raw_text.split("\n")):
        if not line:
            continue
        if len(line) < MIN_NAME_LEN or len(line) > MAX_NAME_LEN:
            continue
        if not NAME_LINE_PATTERN.match(line):
            continue
        if TYPE_LINE_WORDS.match(line):
            continue
        if POWER_TOUGHNESS_PATTERN.match(line):
            continue
        return line

    return None
