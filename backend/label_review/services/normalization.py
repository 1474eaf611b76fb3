"""Text and unit normalization helpers for field comparison.

Parses alcohol content, net contents and age statements as they appear on
labels and application forms into canonical numeric values.
"""

import re
import unicodedata
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


# Unit conversion factors to milliliters
FL_OZ_TO_ML = 29.5735
PINT_TO_ML = 473.176
QUART_TO_ML = 946.353
GALLON_TO_ML = 3785.41

UNIT_TO_ML: Dict[str, float] = {
    "ml": 1.0,
    "milliliter": 1.0,
    "milliliters": 1.0,
    "millilitre": 1.0,
    "millilitres": 1.0,
    "cl": 10.0,
    "centiliter": 10.0,
    "centiliters": 10.0,
    "centilitre": 10.0,
    "centilitres": 10.0,
    "l": 1000.0,
    "liter": 1000.0,
    "liters": 1000.0,
    "litre": 1000.0,
    "litres": 1000.0,
    "oz": FL_OZ_TO_ML,
    "fl oz": FL_OZ_TO_ML,
    "floz": FL_OZ_TO_ML,
    "fluid ounce": FL_OZ_TO_ML,
    "fluid ounces": FL_OZ_TO_ML,
    "fluid oz": FL_OZ_TO_ML,
    "fl ounce": FL_OZ_TO_ML,
    "fl ounces": FL_OZ_TO_ML,
    "ounce": FL_OZ_TO_ML,
    "ounces": FL_OZ_TO_ML,
    "pt": PINT_TO_ML,
    "pint": PINT_TO_ML,
    "pints": PINT_TO_ML,
    "qt": QUART_TO_ML,
    "quart": QUART_TO_ML,
    "quarts": QUART_TO_ML,
    "gal": GALLON_TO_ML,
    "gallon": GALLON_TO_ML,
    "gallons": GALLON_TO_ML,
}

# Longest first so "fl oz" is tried before "l"
_UNITS_BY_LENGTH = sorted(UNIT_TO_ML, key=len, reverse=True)

_NUMBER = r"(\d[\d,]*(?:\.\d+)?|\.\d+)"

_PROOF_PATTERN = re.compile(_NUMBER + r"\s*(?:°\s*)?-?\s*proof\b", re.IGNORECASE)
_PERCENT_PATTERN = re.compile(_NUMBER + r"\s*%")
_ABV_WORD_PATTERN = re.compile(_NUMBER + r"\s*(?:abv\b|alc\b)", re.IGNORECASE)
_VOLUME_PATTERN = re.compile(_NUMBER + r"\s*([a-z][a-z.\s]*)", re.IGNORECASE)
_AGE_YEARS_PATTERN = re.compile(r"(\d+)\s*-?\s*(?:years?|yrs?)\b", re.IGNORECASE)
_AGED_PATTERN = re.compile(r"aged\s+(\d+)", re.IGNORECASE)
_OUNCE_WORD_PATTERN = re.compile(r"\b(?:oz|ounces?)\b")


def normalize_whitespace(text: str) -> str:
    """NFKC-normalize, collapse runs of whitespace into single spaces and trim."""
    normalized = unicodedata.normalize("NFKC", text)
    return re.sub(r"\s+", " ", normalized).strip()


def _to_float(number: str) -> Optional[float]:
    try:
        return float(number.replace(",", ""))
    except ValueError:
        return None


def parse_alcohol_content(value: str) -> Optional[float]:
    """
    Extract ABV percentage from label or form text.

    Handles "45% Alc./Vol.", "45% ABV", "12.5%", "40 ABV" and proof
    notation ("90 Proof" -> 45.0, fractional proof allowed).

    Returns:
        ABV percentage, or None if no alcohol statement was recognized
    """
    cleaned = normalize_whitespace(value)

    # Proof takes precedence: "90 Proof (45% Alc./Vol.)"
    proof_match = _PROOF_PATTERN.search(cleaned)
    if proof_match:
        proof = _to_float(proof_match.group(1))
        if proof is not None:
            return proof / 2

    for pattern in (_PERCENT_PATTERN, _ABV_WORD_PATTERN):
        match = pattern.search(cleaned)
        if match:
            return _to_float(match.group(1))

    return None


def _unit_multiplier(unit_text: str) -> Optional[float]:
    """Resolve a unit string such as "fl. oz." or "ml bottle" to a mL factor."""
    unit = unit_text.lower().replace(".", " ")
    unit = normalize_whitespace(unit)
    if not unit:
        return None

    if unit in UNIT_TO_ML:
        return UNIT_TO_ML[unit]

    # Unit followed by other words, e.g. "ml bottle"
    for candidate in _UNITS_BY_LENGTH:
        if re.match(re.escape(candidate) + r"\b", unit):
            return UNIT_TO_ML[candidate]

    # Other ounce spellings, e.g. "U.S. fluid oz"
    if _OUNCE_WORD_PATTERN.search(unit):
        return FL_OZ_TO_ML

    return None


def parse_net_contents(value: str) -> Optional[float]:
    """
    Parse a net contents statement into milliliters.

    Handles metric ("750 mL", "75cL", "1.5 L", "1 Liter") and US customary
    ("25.4 FL OZ", "1 gallon", "1 pint") units.

    Returns:
        Volume in mL rounded to 2 decimals, or None if unparseable
    """
    cleaned = normalize_whitespace(value)

    for match in _VOLUME_PATTERN.finditer(cleaned):
        amount = _to_float(match.group(1))
        if amount is None:
            continue
        multiplier = _unit_multiplier(match.group(2))
        if multiplier is not None:
            return round(amount * multiplier, 2)

    return None


def parse_container_size_ml(value: str) -> Optional[int]:
    """
    Parse a declared container size into whole milliliters.

    Like parse_net_contents, but also accepts a bare number (assumed mL)
    and returns None for non-positive sizes.
    """
    cleaned = normalize_whitespace(value)

    bare = re.fullmatch(_NUMBER, cleaned)
    if bare:
        amount = _to_float(bare.group(1))
    else:
        amount = parse_net_contents(cleaned)

    if amount is None or amount <= 0:
        return None
    return int(round(amount))


def parse_age_statement(value: str) -> Optional[int]:
    """
    Parse an age statement into whole years.

    Handles "Aged 12 Years", "12 Year Old", "Aged 4" and "10 yrs".
    """
    cleaned = normalize_whitespace(value)

    match = _AGE_YEARS_PATTERN.search(cleaned)
    if match:
        return int(match.group(1))

    aged = _AGED_PATTERN.search(cleaned)
    if aged:
        return int(aged.group(1))

    return None


def digits_only(value: str) -> str:
    """Strip every non-digit character ("Vintage 2021" -> "2021")."""
    return re.sub(r"\D", "", value)
