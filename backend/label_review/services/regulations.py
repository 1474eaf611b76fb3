"""Static regulatory tables for alcohol beverage labels.

Per-category mandatory/optional fields and legal container sizes,
field severity classes, recognized qualifying phrases and the mandatory
health warning statement (27 CFR Part 16).
"""

from typing import Dict, FrozenSet, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class FieldName(str, Enum):
    """Regulated label fields known to the comparison engine."""
    BRAND_NAME = "brand_name"
    FANCIFUL_NAME = "fanciful_name"
    CLASS_TYPE = "class_type"
    ALCOHOL_CONTENT = "alcohol_content"
    NET_CONTENTS = "net_contents"
    HEALTH_WARNING = "health_warning"
    NAME_AND_ADDRESS = "name_and_address"
    QUALIFYING_PHRASE = "qualifying_phrase"
    COUNTRY_OF_ORIGIN = "country_of_origin"
    GRAPE_VARIETAL = "grape_varietal"
    APPELLATION_OF_ORIGIN = "appellation_of_origin"
    VINTAGE_YEAR = "vintage_year"
    SULFITE_DECLARATION = "sulfite_declaration"
    AGE_STATEMENT = "age_statement"
    STATE_OF_DISTILLATION = "state_of_distillation"
    STANDARDS_OF_FILL = "standards_of_fill"


def resolve_field(field_name: str) -> Optional[FieldName]:
    """Map a raw field identifier to a known field, or None for unknown fields."""
    try:
        return FieldName(field_name.strip().lower())
    except (ValueError, AttributeError):
        return None


class BeverageCategory(str, Enum):
    """Declared beverage category of an application."""
    DISTILLED_SPIRITS = "distilled_spirits"
    WINE = "wine"
    MALT_BEVERAGE = "malt_beverage"


class SeverityClass(str, Enum):
    """How a field's failure affects the overall disposition."""
    REJECTION = "rejection"
    MINOR = "minor"
    STANDARD = "standard"


@dataclass(frozen=True)
class CategoryRules:
    """Label requirements for one beverage category."""
    label: str
    mandatory_fields: Tuple[FieldName, ...]
    optional_fields: Tuple[FieldName, ...]
    valid_sizes_ml: Optional[FrozenSet[int]]  # None = no restriction


_COMMON_MANDATORY = (
    FieldName.BRAND_NAME,
    FieldName.CLASS_TYPE,
    FieldName.ALCOHOL_CONTENT,
    FieldName.NET_CONTENTS,
    FieldName.HEALTH_WARNING,
    FieldName.NAME_AND_ADDRESS,
    FieldName.QUALIFYING_PHRASE,
)

CATEGORY_RULES: Dict[BeverageCategory, CategoryRules] = {
    BeverageCategory.DISTILLED_SPIRITS: CategoryRules(
        label="Distilled Spirits",
        mandatory_fields=_COMMON_MANDATORY,
        optional_fields=(
            FieldName.FANCIFUL_NAME,
            FieldName.COUNTRY_OF_ORIGIN,
            FieldName.AGE_STATEMENT,
            FieldName.STATE_OF_DISTILLATION,
            FieldName.STANDARDS_OF_FILL,
        ),
        valid_sizes_ml=frozenset({
            50, 100, 187, 200, 250, 331, 350, 355, 375, 475, 500, 570, 700,
            710, 720, 750, 900, 945, 1000, 1500, 1750, 1800, 2000, 3000, 3750,
        }),
    ),
    BeverageCategory.WINE: CategoryRules(
        label="Wine",
        mandatory_fields=_COMMON_MANDATORY + (
            FieldName.GRAPE_VARIETAL,
            FieldName.APPELLATION_OF_ORIGIN,
            FieldName.SULFITE_DECLARATION,
        ),
        optional_fields=(
            FieldName.FANCIFUL_NAME,
            FieldName.COUNTRY_OF_ORIGIN,
            FieldName.VINTAGE_YEAR,
            FieldName.STANDARDS_OF_FILL,
        ),
        valid_sizes_ml=frozenset({
            180, 187, 200, 250, 300, 330, 360, 375, 473, 500, 550, 568, 600,
            620, 700, 720, 750, 1000, 1500, 1800, 2250, 3000,
        }),
    ),
    BeverageCategory.MALT_BEVERAGE: CategoryRules(
        label="Malt Beverages",
        mandatory_fields=(
            FieldName.BRAND_NAME,
            FieldName.CLASS_TYPE,
            FieldName.NET_CONTENTS,
            FieldName.HEALTH_WARNING,
            FieldName.NAME_AND_ADDRESS,
            FieldName.QUALIFYING_PHRASE,
        ),
        optional_fields=(
            FieldName.FANCIFUL_NAME,
            FieldName.ALCOHOL_CONTENT,
            FieldName.COUNTRY_OF_ORIGIN,
            FieldName.STANDARDS_OF_FILL,
        ),
        valid_sizes_ml=None,
    ),
}


def mandatory_fields(category: BeverageCategory) -> List[str]:
    """Return the mandatory field names for a beverage category."""
    return [f.value for f in CATEGORY_RULES[category].mandatory_fields]


def optional_fields(category: BeverageCategory) -> List[str]:
    """Return the optional field names for a beverage category."""
    return [f.value for f in CATEGORY_RULES[category].optional_fields]


def is_mandatory(field_name: str, category: BeverageCategory) -> bool:
    field = resolve_field(field_name)
    return field is not None and field in CATEGORY_RULES[category].mandatory_fields


def is_valid_size(category: BeverageCategory, size_ml: float) -> bool:
    """
    Check whether a container size is legal for the category.

    Categories without a size list accept any size.
    """
    valid_sizes = CATEGORY_RULES[category].valid_sizes_ml
    if valid_sizes is None:
        return True
    return size_ml in valid_sizes


# Severity policy. Fields not listed are STANDARD.
FIELD_SEVERITY: Dict[FieldName, SeverityClass] = {
    FieldName.HEALTH_WARNING: SeverityClass.REJECTION,
    FieldName.BRAND_NAME: SeverityClass.MINOR,
    FieldName.FANCIFUL_NAME: SeverityClass.MINOR,
    FieldName.APPELLATION_OF_ORIGIN: SeverityClass.MINOR,
    FieldName.GRAPE_VARIETAL: SeverityClass.MINOR,
}


def severity_for(field_name: str) -> SeverityClass:
    """Return the severity class of a field (unknown fields are STANDARD)."""
    field = resolve_field(field_name)
    if field is None:
        return SeverityClass.STANDARD
    return FIELD_SEVERITY.get(field, SeverityClass.STANDARD)


# Legally recognized qualifying phrases, longest first so that compound
# phrases win over the shorter phrases they contain.
QUALIFYING_PHRASES: Tuple[str, ...] = tuple(sorted(
    (
        "Bottled by",
        "Packed by",
        "Distilled by",
        "Blended by",
        "Produced by",
        "Prepared by",
        "Made by",
        "Manufactured by",
        "Brewed by",
        "Imported by",
        "Cellared and Bottled by",
        "Vinted and Bottled by",
        "Prepared and Bottled by",
        "Produced and Bottled by",
        "Brewed and Bottled by",
        "Estate Bottled",
    ),
    key=len,
    reverse=True,
))

_QUALIFYING_PHRASES_LOWER = tuple(p.lower() for p in QUALIFYING_PHRASES)


def is_valid_qualifying_phrase(text: str) -> bool:
    """Check whether text is exactly a recognized qualifying phrase (case-insensitive)."""
    normalized = " ".join(text.split()).lower()
    return normalized in _QUALIFYING_PHRASES_LOWER


def find_qualifying_phrase(text: str) -> Optional[str]:
    """Return the longest recognized phrase contained in text (lowercase), if any."""
    normalized = " ".join(text.split()).lower()
    for phrase in _QUALIFYING_PHRASES_LOWER:
        if phrase in normalized:
            return phrase
    return None


# Mandatory health warning statement (27 CFR 16.21)
HEALTH_WARNING_PREFIX = "GOVERNMENT WARNING:"

HEALTH_WARNING_SECTION_1 = (
    "(1) According to the Surgeon General, women should not drink alcoholic "
    "beverages during pregnancy because of the risk of birth defects."
)

HEALTH_WARNING_SECTION_2 = (
    "(2) Consumption of alcoholic beverages impairs your ability to drive a car "
    "or operate machinery, and may cause health problems."
)

HEALTH_WARNING_FULL = f"{HEALTH_WARNING_PREFIX} {HEALTH_WARNING_SECTION_1} {HEALTH_WARNING_SECTION_2}"


def check_health_warning(text: str) -> Tuple[bool, List[str]]:
    """
    Validate text against the mandatory health warning statement.

    Checks the all-caps prefix, both numbered sections and the full
    wording (whitespace-insensitive).

    Returns:
        Tuple of (valid, issues)
    """
    trimmed = text.strip()
    if not trimmed:
        return False, ["Health warning statement is empty"]

    issues: List[str] = []

    if not trimmed.startswith(HEALTH_WARNING_PREFIX):
        if trimmed.lower().startswith(HEALTH_WARNING_PREFIX.lower()):
            issues.append('"GOVERNMENT WARNING:" prefix must be in ALL CAPS')
        else:
            issues.append('Missing "GOVERNMENT WARNING:" prefix')

    normalized = " ".join(trimmed.split())
    if normalized != HEALTH_WARNING_FULL:
        if HEALTH_WARNING_SECTION_1 not in normalized:
            issues.append("Missing or incorrect section (1) - Surgeon General pregnancy warning")
        if HEALTH_WARNING_SECTION_2 not in normalized:
            issues.append("Missing or incorrect section (2) - impaired driving/machinery warning")
        if "(1)" not in normalized:
            issues.append('Missing section number "(1)"')
        if "(2)" not in normalized:
            issues.append('Missing section number "(2)"')
        if not issues:
            issues.append("Health warning text does not match the required statement")

    return not issues, issues


def health_warning_min_type_size_mm(container_size_ml: float) -> int:
    """
    Minimum type size for the health warning, per 27 CFR 16.22.

    - Containers <= 237 mL (8 fl oz): 1 mm
    - Containers > 237 mL up to 3 L: 2 mm
    - Containers > 3 L: 3 mm
    """
    if container_size_ml <= 237:
        return 1
    if container_size_ml <= 3000:
        return 2
    return 3
