"""Tests for text and unit normalization helpers."""

import pytest
from label_review.services.normalization import (
    FL_OZ_TO_ML,
    GALLON_TO_ML,
    digits_only,
    normalize_whitespace,
    parse_age_statement,
    parse_alcohol_content,
    parse_container_size_ml,
    parse_net_contents,
)


class TestAlcoholParsing:
    """Test alcohol content parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("45% Alc./Vol.", 45.0),
        ("45% ABV", 45.0),
        ("12.5%", 12.5),
        ("40 ABV", 40.0),
        ("13.5% alc/vol", 13.5),
        ("90 Proof", 45.0),
        ("86.6 proof", 43.3),
        ("100-Proof", 50.0),
        ("90° Proof", 45.0),
        ("90 Proof (45% Alc./Vol.)", 45.0),
    ])
    def test_parses(self, text, expected):
        assert parse_alcohol_content(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "Kentucky Bourbon", "forty percent"])
    def test_unparseable(self, text):
        assert parse_alcohol_content(text) is None


class TestNetContentsParsing:
    """Test net contents parsing into milliliters."""

    @pytest.mark.parametrize("text,expected", [
        ("750 mL", 750.0),
        ("750ML", 750.0),
        ("75 cL", 750.0),
        ("1.5 L", 1500.0),
        ("1 Liter", 1000.0),
        ("1 litre", 1000.0),
        ("1,000 ml", 1000.0),
        ("750 ml bottle", 750.0),
    ])
    def test_metric(self, text, expected):
        assert parse_net_contents(text) == pytest.approx(expected)

    def test_fluid_ounces(self):
        assert parse_net_contents("25.4 FL OZ") == pytest.approx(round(25.4 * FL_OZ_TO_ML, 2))
        assert parse_net_contents("25.4 fl. oz.") == pytest.approx(round(25.4 * FL_OZ_TO_ML, 2))
        assert parse_net_contents("12 oz") == pytest.approx(round(12 * FL_OZ_TO_ML, 2))

    @pytest.mark.parametrize("text", [
        "25.4 Fluid Oz",
        "25.4 fl ounces",
        "25.4 FL. OUNCE",
        "25.4 U.S. fluid oz",
    ])
    def test_fluid_ounce_spellings(self, text):
        assert parse_net_contents(text) == pytest.approx(round(25.4 * FL_OZ_TO_ML, 2))

    def test_fluid_ounces_not_read_as_liters(self):
        """Test that fl oz is not resolved to the liter unit."""
        assert parse_net_contents("8 fl oz") < 1000

    def test_gallon(self):
        assert parse_net_contents("1 gallon") == pytest.approx(GALLON_TO_ML)

    @pytest.mark.parametrize("text", ["", "750", "one bottle", "12.5% ABV"])
    def test_unparseable(self, text):
        assert parse_net_contents(text) is None


class TestContainerSize:

    @pytest.mark.parametrize("text,expected", [
        ("750", 750),
        ("750 mL", 750),
        ("1.75 L", 1750),
        (" 375 ", 375),
    ])
    def test_parses(self, text, expected):
        assert parse_container_size_ml(text) == expected

    @pytest.mark.parametrize("text", ["", "big", "0", "0 mL"])
    def test_rejects(self, text):
        assert parse_container_size_ml(text) is None


class TestAgeStatement:

    @pytest.mark.parametrize("text,expected", [
        ("Aged 12 Years", 12),
        ("12 Year Old", 12),
        ("12-year-old", 12),
        ("10 yrs", 10),
        ("Aged 4", 4),
    ])
    def test_parses(self, text, expected):
        assert parse_age_statement(text) == expected

    def test_unparseable(self):
        assert parse_age_statement("Extra Old") is None


class TestHelpers:

    def test_normalize_whitespace(self):
        assert normalize_whitespace("  Old \n Tom\t Distillery ") == "Old Tom Distillery"

    def test_normalize_compatibility_characters(self):
        assert normalize_whitespace("７５０ mL") == "750 mL"

    def test_digits_only(self):
        assert digits_only("Vintage 2021") == "2021"
        assert digits_only("NV") == ""
