"""Field comparison engine.

Decides, per regulated field, whether the value read off a label matches
the value declared in the application. Each field is compared with one of
five strategies (exact, fuzzy, normalized numeric, contains, enumerated
phrase). Comparison is pure and total: every input yields a FieldVerdict.
"""

import math
import re
from typing import Dict, Optional
from dataclasses import dataclass
from enum import Enum
import logging

from rapidfuzz import fuzz

from .normalization import (
    normalize_whitespace,
    parse_alcohol_content,
    parse_net_contents,
    parse_age_statement,
    digits_only,
)
from .regulations import (
    FieldName,
    resolve_field,
    check_health_warning,
    is_valid_qualifying_phrase,
    find_qualifying_phrase,
)
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


class VerdictStatus(str, Enum):
    """Outcome of comparing one field."""
    MATCH = "match"
    MISMATCH = "mismatch"
    NOT_FOUND = "not_found"
    # Never produced by the comparator; the validation pipeline uses it to
    # label minor-field mismatches that the applicant must fix.
    NEEDS_CORRECTION = "needs_correction"


class MatchStrategy(str, Enum):
    """How an expected value is compared against an extracted value."""
    EXACT = "exact"
    FUZZY = "fuzzy"
    NORMALIZED = "normalized"
    CONTAINS = "contains"
    ENUM = "enum"


FIELD_MATCH_STRATEGY: Dict[FieldName, MatchStrategy] = {
    FieldName.HEALTH_WARNING: MatchStrategy.EXACT,
    FieldName.VINTAGE_YEAR: MatchStrategy.EXACT,
    FieldName.BRAND_NAME: MatchStrategy.FUZZY,
    FieldName.FANCIFUL_NAME: MatchStrategy.FUZZY,
    FieldName.CLASS_TYPE: MatchStrategy.FUZZY,
    FieldName.NAME_AND_ADDRESS: MatchStrategy.FUZZY,
    FieldName.GRAPE_VARIETAL: MatchStrategy.FUZZY,
    FieldName.APPELLATION_OF_ORIGIN: MatchStrategy.FUZZY,
    FieldName.SULFITE_DECLARATION: MatchStrategy.FUZZY,
    FieldName.STATE_OF_DISTILLATION: MatchStrategy.FUZZY,
    FieldName.STANDARDS_OF_FILL: MatchStrategy.FUZZY,
    FieldName.ALCOHOL_CONTENT: MatchStrategy.NORMALIZED,
    FieldName.NET_CONTENTS: MatchStrategy.NORMALIZED,
    FieldName.AGE_STATEMENT: MatchStrategy.NORMALIZED,
    FieldName.COUNTRY_OF_ORIGIN: MatchStrategy.CONTAINS,
    FieldName.QUALIFYING_PHRASE: MatchStrategy.ENUM,
}

# Unknown fields
DEFAULT_STRATEGY = MatchStrategy.FUZZY

CASE_ONLY_CONFIDENCE = 95
NUMERIC_TOLERANCE_CONFIDENCE = 95
NUMERIC_MISMATCH_CONFIDENCE = 95
CONTAINS_MATCH_CONFIDENCE = 95
CONTAINS_MISMATCH_CONFIDENCE = 85
TOKEN_OVERLAP_THRESHOLD = 0.5
ENUM_MATCH_CONFIDENCE = 95
ENUM_WRONG_PHRASE_CONFIDENCE = 90

# Floating point slack for tolerance boundaries (13.0 - 12.5 == 0.5)
_EPSILON = 1e-9


@dataclass(frozen=True)
class FieldVerdict:
    """Result of comparing a single field. Immutable."""
    field_name: str
    status: VerdictStatus
    confidence: int
    rationale: str
    strategy: Optional[MatchStrategy] = None


def to_percent(score: float) -> int:
    """Convert a [0,1] score to a whole percentage, rounding half up."""
    return int(math.floor(score * 100 + 0.5))


def strategy_for(field_name: str) -> MatchStrategy:
    """Return the default strategy for a field; unknown fields use fuzzy."""
    field = resolve_field(field_name)
    if field is None:
        return DEFAULT_STRATEGY
    return FIELD_MATCH_STRATEGY.get(field, DEFAULT_STRATEGY)


def similarity(a: str, b: str) -> float:
    """
    Character-level similarity in [0, 1].

    Case and whitespace insensitive normalized Indel similarity. Strings
    shorter than two characters have no fractional similarity and compare
    by equality only.
    """
    norm_a = normalize_whitespace(a).lower()
    norm_b = normalize_whitespace(b).lower()

    if norm_a == norm_b:
        return 1.0

    if len(norm_a) < 2 or len(norm_b) < 2:
        return 0.0

    return fuzz.ratio(norm_a, norm_b) / 100.0


def _tokens(text: str) -> set:
    return set(re.findall(r"\w+", text.lower()))


class FieldComparator:
    """Compares expected application values against extracted label values."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def compare(
        self,
        field_name: str,
        expected: str,
        extracted: Optional[str],
        match_type: Optional[MatchStrategy] = None,
    ) -> FieldVerdict:
        """
        Compare one field.

        Args:
            field_name: Field identifier, e.g. "brand_name"
            expected: Value declared in the application
            extracted: Value read off the label, or None if not found
            match_type: Strategy override (ignored when extracted is absent)

        Returns:
            FieldVerdict with status, confidence (0-100) and rationale
        """
        if extracted is None or not extracted.strip():
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.NOT_FOUND,
                confidence=0,
                rationale=f'Field "{field_name}" was not found on the label.',
            )

        expected = expected or ""
        strategy = MatchStrategy(match_type) if match_type else strategy_for(field_name)
        logger.debug(f"Comparing {field_name} with strategy={strategy.value}")

        if strategy == MatchStrategy.EXACT:
            return self._compare_exact(field_name, expected, extracted)
        if strategy == MatchStrategy.NORMALIZED:
            return self._compare_normalized(field_name, expected, extracted)
        if strategy == MatchStrategy.CONTAINS:
            return self._compare_contains(field_name, expected, extracted)
        if strategy == MatchStrategy.ENUM:
            return self._compare_enum(field_name, expected, extracted)
        return self._compare_fuzzy(field_name, expected, extracted)

    def _compare_exact(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        """
        Exact comparison after whitespace normalization.

        Vintage years compare on digits only. A difference in letter case
        alone is still a match, at reduced confidence.
        """
        norm_expected = normalize_whitespace(expected)
        norm_extracted = normalize_whitespace(extracted)

        # "Non-Vintage" and "NV" both reduce to "" and match
        if resolve_field(field_name) == FieldName.VINTAGE_YEAR:
            norm_expected = digits_only(norm_expected)
            norm_extracted = digits_only(norm_extracted)

        if norm_expected == norm_extracted:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=100,
                rationale=f"{field_name} matches exactly after whitespace normalization.",
                strategy=MatchStrategy.EXACT,
            )

        if norm_expected.lower() == norm_extracted.lower():
            rationale = f"{field_name} matches except for letter case."
            if resolve_field(field_name) == FieldName.HEALTH_WARNING:
                rationale += ' Check that the "GOVERNMENT WARNING:" prefix is in all caps on the label.'
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=CASE_ONLY_CONFIDENCE,
                rationale=rationale,
                strategy=MatchStrategy.EXACT,
            )

        score = similarity(norm_expected, norm_extracted)
        rationale = (
            f"{field_name} does not match exactly ({to_percent(score)}% similar). "
            f'Expected: "{norm_expected[:100]}" Found: "{norm_extracted[:100]}"'
        )
        if resolve_field(field_name) == FieldName.HEALTH_WARNING:
            _, issues = check_health_warning(extracted)
            if issues:
                rationale += " Issues: " + "; ".join(issues) + "."

        return FieldVerdict(
            field_name=field_name,
            status=VerdictStatus.MISMATCH,
            confidence=to_percent(score),
            rationale=rationale,
            strategy=MatchStrategy.EXACT,
        )

    def _compare_fuzzy(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        """
        Fuzzy comparison tolerant of OCR noise.

        Containment in either direction (a truncated OCR read) is a match
        regardless of the similarity score.
        """
        threshold = self.settings.fuzzy_match_threshold
        floor = to_percent(threshold)
        score = similarity(expected, extracted)

        if score >= threshold:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=max(floor, to_percent(score)),
                rationale=f"{field_name} matches with {to_percent(score)}% similarity.",
                strategy=MatchStrategy.FUZZY,
            )

        norm_expected = normalize_whitespace(expected).lower()
        norm_extracted = normalize_whitespace(extracted).lower()

        if norm_expected and norm_extracted and (
            norm_expected in norm_extracted or norm_extracted in norm_expected
        ):
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=max(floor, to_percent(score)),
                rationale=(
                    f"{field_name} partially matches (one value contains the other). "
                    f"Similarity: {to_percent(score)}%."
                ),
                strategy=MatchStrategy.FUZZY,
            )

        return FieldVerdict(
            field_name=field_name,
            status=VerdictStatus.MISMATCH,
            confidence=to_percent(score),
            rationale=(
                f"{field_name} does not match. Similarity: {to_percent(score)}%. "
                f'Expected: "{expected}" Found: "{extracted}"'
            ),
            strategy=MatchStrategy.FUZZY,
        )

    def _compare_normalized(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        """Numeric comparison after unit normalization; unparseable values fall back to fuzzy."""
        field = resolve_field(field_name)

        if field == FieldName.ALCOHOL_CONTENT:
            return self._compare_alcohol(field_name, expected, extracted)
        if field == FieldName.NET_CONTENTS:
            return self._compare_net_contents(field_name, expected, extracted)
        if field == FieldName.AGE_STATEMENT:
            return self._compare_age(field_name, expected, extracted)

        logger.debug(f"No numeric normalization for {field_name}, using fuzzy")
        return self._compare_fuzzy(field_name, expected, extracted)

    def _compare_alcohol(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        expected_abv = parse_alcohol_content(expected)
        extracted_abv = parse_alcohol_content(extracted)

        if expected_abv is None or extracted_abv is None:
            logger.debug(f"Unparseable alcohol content '{expected}' / '{extracted}', using fuzzy")
            return self._compare_fuzzy(field_name, expected, extracted)

        difference = abs(expected_abv - extracted_abv)
        tolerance = self.settings.abv_tolerance

        if difference < _EPSILON:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=100,
                rationale=f"Alcohol content matches: expected {expected_abv:g}%, found {extracted_abv:g}%.",
                strategy=MatchStrategy.NORMALIZED,
            )

        if difference <= tolerance + _EPSILON:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=NUMERIC_TOLERANCE_CONFIDENCE,
                rationale=(
                    f"Alcohol content within tolerance: expected {expected_abv:g}%, "
                    f"found {extracted_abv:g}% (difference {difference:.2g} <= {tolerance:g} points)."
                ),
                strategy=MatchStrategy.NORMALIZED,
            )

        return FieldVerdict(
            field_name=field_name,
            status=VerdictStatus.MISMATCH,
            confidence=NUMERIC_MISMATCH_CONFIDENCE,
            rationale=(
                f"Alcohol content mismatch: expected {expected_abv:g}%, found {extracted_abv:g}% "
                f"(tolerance ±{tolerance:g} points)."
            ),
            strategy=MatchStrategy.NORMALIZED,
        )

    def _compare_net_contents(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        expected_ml = parse_net_contents(expected)
        extracted_ml = parse_net_contents(extracted)

        if expected_ml is None or extracted_ml is None:
            logger.debug(f"Unparseable net contents '{expected}' / '{extracted}', using fuzzy")
            return self._compare_fuzzy(field_name, expected, extracted)

        difference = abs(expected_ml - extracted_ml)
        tolerance = expected_ml * self.settings.net_contents_tolerance

        if difference < _EPSILON:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=100,
                rationale=f"Net contents matches: expected {expected_ml:g} mL, found {extracted_ml:g} mL.",
                strategy=MatchStrategy.NORMALIZED,
            )

        if difference <= tolerance + _EPSILON:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=NUMERIC_TOLERANCE_CONFIDENCE,
                rationale=(
                    f"Net contents within {self.settings.net_contents_tolerance:.0%} tolerance: "
                    f"expected {expected_ml:g} mL, found {extracted_ml:g} mL."
                ),
                strategy=MatchStrategy.NORMALIZED,
            )

        return FieldVerdict(
            field_name=field_name,
            status=VerdictStatus.MISMATCH,
            confidence=NUMERIC_MISMATCH_CONFIDENCE,
            rationale=f"Net contents mismatch: expected {expected_ml:g} mL, found {extracted_ml:g} mL.",
            strategy=MatchStrategy.NORMALIZED,
        )

    def _compare_age(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        expected_years = parse_age_statement(expected)
        extracted_years = parse_age_statement(extracted)

        if expected_years is None or extracted_years is None:
            logger.debug(f"Unparseable age statement '{expected}' / '{extracted}', using fuzzy")
            return self._compare_fuzzy(field_name, expected, extracted)

        if expected_years == extracted_years:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=100,
                rationale=f"Age statement matches: {expected_years} years.",
                strategy=MatchStrategy.NORMALIZED,
            )

        return FieldVerdict(
            field_name=field_name,
            status=VerdictStatus.MISMATCH,
            confidence=NUMERIC_MISMATCH_CONFIDENCE,
            rationale=f"Age statement mismatch: expected {expected_years} years, found {extracted_years} years.",
            strategy=MatchStrategy.NORMALIZED,
        )

    def _compare_contains(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        """
        Containment or word overlap, for values such as country names.

        "United States" matches "United States of America".
        """
        norm_expected = normalize_whitespace(expected).lower()
        norm_extracted = normalize_whitespace(extracted).lower()

        if norm_expected and (norm_expected in norm_extracted or norm_extracted in norm_expected):
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=CONTAINS_MATCH_CONFIDENCE,
                rationale=f"{field_name} found within extracted text.",
                strategy=MatchStrategy.CONTAINS,
            )

        expected_tokens = _tokens(norm_expected)
        common = expected_tokens & _tokens(norm_extracted)
        overlap = len(common) / len(expected_tokens) if expected_tokens else 0.0

        if overlap >= TOKEN_OVERLAP_THRESHOLD:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=CONTAINS_MATCH_CONFIDENCE,
                rationale=(
                    f"{field_name} partially matches ({', '.join(sorted(common))} found in "
                    f"extracted text, {overlap:.0%} word overlap)."
                ),
                strategy=MatchStrategy.CONTAINS,
            )

        return FieldVerdict(
            field_name=field_name,
            status=VerdictStatus.MISMATCH,
            confidence=CONTAINS_MISMATCH_CONFIDENCE,
            rationale=f'{field_name} not found in extracted text. Expected: "{expected}" Found: "{extracted}"',
            strategy=MatchStrategy.CONTAINS,
        )

    def _compare_enum(self, field_name: str, expected: str, extracted: str) -> FieldVerdict:
        """
        Compare against the closed list of qualifying phrases.

        A different recognized phrase is a high-confidence mismatch. Text
        containing no recognized phrase, or an unrecognized expected value,
        falls back to fuzzy.
        """
        if not is_valid_qualifying_phrase(expected):
            logger.debug(f"'{expected}' is not a recognized qualifying phrase, using fuzzy")
            return self._compare_fuzzy(field_name, expected, extracted)

        expected_phrase = normalize_whitespace(expected).lower()
        norm_extracted = normalize_whitespace(extracted).lower()

        if expected_phrase in norm_extracted:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MATCH,
                confidence=ENUM_MATCH_CONFIDENCE,
                rationale=f'Qualifying phrase matches: "{expected_phrase}".',
                strategy=MatchStrategy.ENUM,
            )

        found_phrase = find_qualifying_phrase(norm_extracted)
        if found_phrase is not None:
            return FieldVerdict(
                field_name=field_name,
                status=VerdictStatus.MISMATCH,
                confidence=ENUM_WRONG_PHRASE_CONFIDENCE,
                rationale=(
                    f'Qualifying phrase mismatch: expected "{expected_phrase}", '
                    f'found a different recognized phrase "{found_phrase}".'
                ),
                strategy=MatchStrategy.ENUM,
            )

        logger.debug(f"No recognized qualifying phrase in '{extracted}', using fuzzy")
        return self._compare_fuzzy(field_name, expected, extracted)


_default_comparator: Optional[FieldComparator] = None


def compare_field(
    field_name: str,
    expected: str,
    extracted: Optional[str],
    match_type: Optional[MatchStrategy] = None,
) -> FieldVerdict:
    """Compare one field using the default comparator (see FieldComparator.compare)."""
    global _default_comparator
    if _default_comparator is None:
        _default_comparator = FieldComparator()
    return _default_comparator.compare(field_name, expected, extracted, match_type)
