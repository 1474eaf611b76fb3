"""Tests for the field comparison engine."""

import pytest
from label_review.config import Settings
from label_review.services.comparison import (
    FieldComparator,
    MatchStrategy,
    VerdictStatus,
    compare_field,
    similarity,
    strategy_for,
    to_percent,
)
from label_review.services.regulations import HEALTH_WARNING_FULL


@pytest.fixture
def comparator():
    """Create comparator with default settings."""
    return FieldComparator(Settings())


class TestAbsence:
    """Absent extracted values are always not_found."""

    @pytest.mark.parametrize("extracted", [None, "", "   ", "\n\t"])
    @pytest.mark.parametrize("field_name", [
        "brand_name", "health_warning", "alcohol_content", "country_of_origin",
        "qualifying_phrase", "mystery_field",
    ])
    def test_not_found(self, comparator, field_name, extracted):
        verdict = comparator.compare(field_name, "Something", extracted)

        assert verdict.status == VerdictStatus.NOT_FOUND
        assert verdict.confidence == 0
        assert field_name in verdict.rationale

    def test_absence_overrides_match_type(self, comparator):
        """Absence check runs before any override."""
        verdict = comparator.compare("brand_name", "Old Tom", None, match_type=MatchStrategy.EXACT)
        assert verdict.status == VerdictStatus.NOT_FOUND


class TestTotality:
    """Comparator never raises."""

    @pytest.mark.parametrize("field_name", [
        "brand_name", "health_warning", "vintage_year", "alcohol_content",
        "net_contents", "age_statement", "country_of_origin", "qualifying_phrase", "",
    ])
    @pytest.mark.parametrize("expected,extracted", [
        ("", "x"),
        ("x", "y"),
        ("%%%", "proof"),
        ("12,5 % vol", "---"),
        ("Aged", "years"),
    ])
    def test_returns_verdict(self, comparator, field_name, expected, extracted):
        verdict = comparator.compare(field_name, expected, extracted)

        assert verdict.status in (VerdictStatus.MATCH, VerdictStatus.MISMATCH)
        assert 0 <= verdict.confidence <= 100
        assert verdict.rationale


class TestStrategySelection:
    """Test default strategy table."""

    def test_known_fields(self):
        assert strategy_for("health_warning") == MatchStrategy.EXACT
        assert strategy_for("vintage_year") == MatchStrategy.EXACT
        assert strategy_for("brand_name") == MatchStrategy.FUZZY
        assert strategy_for("alcohol_content") == MatchStrategy.NORMALIZED
        assert strategy_for("net_contents") == MatchStrategy.NORMALIZED
        assert strategy_for("age_statement") == MatchStrategy.NORMALIZED
        assert strategy_for("country_of_origin") == MatchStrategy.CONTAINS
        assert strategy_for("qualifying_phrase") == MatchStrategy.ENUM

    def test_unknown_field_defaults_to_fuzzy(self):
        assert strategy_for("serial_number") == MatchStrategy.FUZZY

    def test_override_is_used(self, comparator):
        verdict = comparator.compare("brand_name", "Old Tom", "OLD TOM", match_type=MatchStrategy.EXACT)

        assert verdict.strategy == MatchStrategy.EXACT
        assert verdict.confidence == 95

    def test_override_accepts_string(self, comparator):
        verdict = comparator.compare("brand_name", "France", "Made in France", match_type="contains")
        assert verdict.strategy == MatchStrategy.CONTAINS


class TestExactStrategy:
    """Test exact comparison (health warning, vintage)."""

    def test_health_warning_exact(self, comparator):
        verdict = comparator.compare("health_warning", HEALTH_WARNING_FULL, HEALTH_WARNING_FULL)

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100

    def test_health_warning_case_only(self, comparator):
        verdict = comparator.compare("health_warning", HEALTH_WARNING_FULL, HEALTH_WARNING_FULL.lower())

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 95
        assert "GOVERNMENT WARNING" in verdict.rationale

    def test_whitespace_collapsed(self, comparator):
        wrapped = HEALTH_WARNING_FULL.replace(" (2)", "\n\n(2)")
        verdict = comparator.compare("health_warning", HEALTH_WARNING_FULL, wrapped)

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100

    def test_health_warning_missing_section(self, comparator):
        truncated = HEALTH_WARNING_FULL.split(" (2)")[0]
        verdict = comparator.compare("health_warning", HEALTH_WARNING_FULL, truncated)

        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence < 100
        assert "section (2)" in verdict.rationale

    def test_vintage_digits_only(self, comparator):
        verdict = comparator.compare("vintage_year", "2021", "Vintage 2021")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100

    def test_non_vintage_spellings_match(self, comparator):
        """Values without digits reduce to the same empty year."""
        verdict = comparator.compare("vintage_year", "Non-Vintage", "NV")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100

    def test_vintage_against_non_vintage(self, comparator):
        verdict = comparator.compare("vintage_year", "2021", "NV")
        assert verdict.status == VerdictStatus.MISMATCH

    def test_vintage_mismatch(self, comparator):
        verdict = comparator.compare("vintage_year", "2021", "2019")

        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence == to_percent(similarity("2021", "2019"))


class TestFuzzyStrategy:
    """Test fuzzy comparison."""

    def test_case_insensitive(self, comparator):
        verdict = comparator.compare("brand_name", "Old Tom Distillery", "OLD TOM DISTILLERY")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100

    def test_minor_ocr_noise(self, comparator):
        verdict = comparator.compare("brand_name", "Old Tom Distillery", "OLD T0M DISTILLERY")

        assert verdict.status == VerdictStatus.MATCH
        assert 80 <= verdict.confidence < 100

    def test_truncated_read_matches(self, comparator):
        """Containment overrides a low similarity score."""
        verdict = comparator.compare("class_type", "Kentucky Straight Bourbon Whiskey", "Bourbon")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence >= 80
        assert "partially" in verdict.rationale

    def test_different_brand(self, comparator):
        verdict = comparator.compare("brand_name", "Old Tom Distillery", "Stone's Throw")

        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence < 80
        assert "Old Tom Distillery" in verdict.rationale

    def test_single_character(self, comparator):
        assert comparator.compare("brand_name", "A", "a").status == VerdictStatus.MATCH

        verdict = comparator.compare("brand_name", "A", "B")
        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence == 0

    def test_threshold_from_settings(self):
        strict = FieldComparator(Settings(fuzzy_match_threshold=0.99))
        verdict = strict.compare("brand_name", "Old Tom Distillery", "OLD T0M DISTILLERY")

        assert verdict.status == VerdictStatus.MISMATCH


class TestSimilarity:

    def test_symmetric(self):
        assert similarity("Old Tom", "Old Tim") == similarity("Old Tim", "Old Tom")

    def test_bounds(self):
        assert similarity("abc", "abc") == 1.0
        assert 0.0 <= similarity("abc", "xyz") <= 1.0

    def test_to_percent_rounds_half_up(self):
        assert to_percent(0.125) == 13
        assert to_percent(0.5) == 50
        assert to_percent(0.0) == 0


class TestAlcoholContent:
    """Test normalized alcohol content comparison."""

    def test_proof_equals_percent(self, comparator):
        verdict = comparator.compare("alcohol_content", "45% Alc./Vol.", "90 Proof")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100
        assert verdict.strategy == MatchStrategy.NORMALIZED

    def test_within_tolerance(self, comparator):
        verdict = comparator.compare("alcohol_content", "12.5% ABV", "12.8% ABV")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 95

    def test_tolerance_boundary_inclusive(self, comparator):
        verdict = comparator.compare("alcohol_content", "12.5%", "13.0%")
        assert verdict.status == VerdictStatus.MATCH

    def test_outside_tolerance(self, comparator):
        verdict = comparator.compare("alcohol_content", "12.5% ABV", "14% ABV")

        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence == 95
        assert "12.5" in verdict.rationale

    def test_unparseable_falls_back_to_fuzzy(self, comparator):
        verdict = comparator.compare("alcohol_content", "forty percent", "Forty Percent")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.strategy == MatchStrategy.FUZZY


class TestNetContents:
    """Test normalized net contents comparison."""

    def test_centiliters(self, comparator):
        verdict = comparator.compare("net_contents", "750 mL", "75 cL")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100

    def test_fluid_ounces_within_tolerance(self, comparator):
        verdict = comparator.compare("net_contents", "750 mL", "25.4 fl oz")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 95

    def test_fluid_oz_spelled_out(self, comparator):
        verdict = comparator.compare("net_contents", "750 mL", "25.4 Fluid Oz")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.strategy == MatchStrategy.NORMALIZED

    def test_liters(self, comparator):
        verdict = comparator.compare("net_contents", "1.75 L", "1750 ml")
        assert verdict.confidence == 100

    def test_mismatch(self, comparator):
        verdict = comparator.compare("net_contents", "750 mL", "375 mL")

        assert verdict.status == VerdictStatus.MISMATCH
        assert "375" in verdict.rationale


class TestAgeStatement:

    def test_equivalent_phrasing(self, comparator):
        verdict = comparator.compare("age_statement", "Aged 12 Years", "12 Year Old")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 100

    def test_different_age(self, comparator):
        verdict = comparator.compare("age_statement", "Aged 12 Years", "10 yrs")
        assert verdict.status == VerdictStatus.MISMATCH


class TestContainsStrategy:
    """Test country of origin comparison."""

    def test_substring(self, comparator):
        verdict = comparator.compare("country_of_origin", "United States", "United States of America")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 95

    def test_token_overlap(self, comparator):
        verdict = comparator.compare("country_of_origin", "Republic of Korea", "Korea, Republic")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 95

    def test_no_overlap(self, comparator):
        verdict = comparator.compare("country_of_origin", "France", "Italy")

        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence == 85


class TestEnumStrategy:
    """Test qualifying phrase comparison."""

    def test_phrase_match(self, comparator):
        verdict = comparator.compare("qualifying_phrase", "Bottled by", "BOTTLED BY")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.confidence == 95

    def test_phrase_within_text(self, comparator):
        verdict = comparator.compare("qualifying_phrase", "Distilled by", "Distilled by Old Tom Co., Bardstown, KY")
        assert verdict.status == VerdictStatus.MATCH

    def test_wrong_known_phrase(self, comparator):
        verdict = comparator.compare("qualifying_phrase", "Bottled by", "Distilled by")

        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence == 90
        assert "distilled by" in verdict.rationale

    def test_garbage_text_is_distinguishable(self, comparator):
        verdict = comparator.compare("qualifying_phrase", "Bottled by", "xq zzkv")

        assert verdict.status == VerdictStatus.MISMATCH
        assert verdict.confidence != 90
        assert verdict.strategy == MatchStrategy.FUZZY

    def test_unrecognized_expected_uses_fuzzy(self, comparator):
        verdict = comparator.compare("qualifying_phrase", "Lovingly crafted by", "Lovingly crafted by")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.strategy == MatchStrategy.FUZZY


class TestModuleFunction:

    def test_compare_field(self):
        verdict = compare_field("brand_name", "Old Tom", "Old Tom")

        assert verdict.status == VerdictStatus.MATCH
        assert verdict.field_name == "brand_name"
