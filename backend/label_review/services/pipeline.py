"""Validation pipeline.

Compares every expected field of an application against the extraction
output, adjudicates the verdict set and computes the values the review
workflow stores: item statuses, disposition, correction window, overall
confidence and the resulting label status and queue.
"""

from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass, replace
import logging

from .comparison import FieldComparator, FieldVerdict, VerdictStatus
from .adjudication import Disposition, StatusAdjudicator, aggregate_confidence
from .deadlines import LabelStatus, QueueCategory, classify_queue
from .regulations import (
    BeverageCategory,
    FieldName,
    SeverityClass,
    HEALTH_WARNING_FULL,
    resolve_field,
    severity_for,
)
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class BoundingBox:
    """Normalized location of a field on a label image."""
    x: float
    y: float
    width: float
    height: float
    angle: float = 0.0


@dataclass
class ExtractedField:
    """One field the extraction step believed it found on a label."""
    field_name: str
    value: Optional[str]
    confidence: float = 0.0
    bounding_box: Optional[BoundingBox] = None
    image_index: int = 0


@dataclass
class ValidationItem:
    """Per-field comparison result as handed to persistence."""
    field_name: str
    expected_value: str
    extracted_value: str
    status: VerdictStatus
    confidence: int
    rationale: str
    bounding_box: Optional[BoundingBox] = None
    image_index: int = 0
    extraction_confidence: float = 0.0


@dataclass
class ValidationOutcome:
    """Complete result of validating one application."""
    items: List[ValidationItem]
    disposition: Disposition
    correction_window_days: Optional[int]
    overall_confidence: int
    auto_approved: bool
    label_status: LabelStatus
    queue: QueueCategory
    summary: str


# Application form keys -> field names
APPLICATION_FIELD_KEYS: Dict[str, FieldName] = {
    "brandName": FieldName.BRAND_NAME,
    "fancifulName": FieldName.FANCIFUL_NAME,
    "classType": FieldName.CLASS_TYPE,
    "alcoholContent": FieldName.ALCOHOL_CONTENT,
    "netContents": FieldName.NET_CONTENTS,
    "healthWarning": FieldName.HEALTH_WARNING,
    "nameAndAddress": FieldName.NAME_AND_ADDRESS,
    "qualifyingPhrase": FieldName.QUALIFYING_PHRASE,
    "countryOfOrigin": FieldName.COUNTRY_OF_ORIGIN,
    "grapeVarietal": FieldName.GRAPE_VARIETAL,
    "appellationOfOrigin": FieldName.APPELLATION_OF_ORIGIN,
    "vintageYear": FieldName.VINTAGE_YEAR,
    "ageStatement": FieldName.AGE_STATEMENT,
    "stateOfDistillation": FieldName.STATE_OF_DISTILLATION,
}

SULFITE_DECLARATION_TEXT = "Contains Sulfites"


def build_expected_fields(
    application_data: Dict[str, Any],
    category: BeverageCategory,
) -> Dict[str, str]:
    """
    Build the field name -> declared value map from application data.

    Accepts camelCase form keys or snake_case field names. Blank values
    are dropped, values are trimmed, a true sulfite declaration becomes
    "Contains Sulfites" and the health warning is always expected.
    """
    fields: Dict[str, str] = {}

    for key, value in application_data.items():
        field = APPLICATION_FIELD_KEYS.get(key) or resolve_field(key)
        if field is None or field == FieldName.SULFITE_DECLARATION:
            continue
        if isinstance(value, str) and value.strip():
            fields[field.value] = value.strip()

    sulfites = application_data.get("sulfiteDeclaration", application_data.get("sulfite_declaration"))
    if sulfites is True:
        fields[FieldName.SULFITE_DECLARATION.value] = SULFITE_DECLARATION_TEXT
    elif isinstance(sulfites, str) and sulfites.strip():
        fields[FieldName.SULFITE_DECLARATION.value] = sulfites.strip()

    fields.setdefault(FieldName.HEALTH_WARNING.value, HEALTH_WARNING_FULL)

    logger.debug(f"Built {len(fields)} expected fields for {BeverageCategory(category).value}")
    return fields


class ValidationPipeline:
    """Runs comparison and adjudication for one application."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.comparator = FieldComparator(self.settings)
        self.adjudicator = StatusAdjudicator(self.settings)

    def run(
        self,
        expected_fields: Dict[str, str],
        extracted_fields: Sequence[ExtractedField],
        category: BeverageCategory,
        container_size_ml: Optional[float] = None,
    ) -> ValidationOutcome:
        """
        Validate one application.

        Args:
            expected_fields: Field name -> declared value
            extracted_fields: Extraction output for the label images
            category: Declared beverage category
            container_size_ml: Declared container size

        Returns:
            ValidationOutcome
        """
        extracted_by_name = {f.field_name: f for f in extracted_fields}

        verdicts: List[FieldVerdict] = []
        items: List[ValidationItem] = []

        for field_name, expected_value in expected_fields.items():
            extracted = extracted_by_name.get(field_name)
            extracted_value = extracted.value if extracted else None

            verdict = self.comparator.compare(field_name, expected_value, extracted_value)

            # Minor-field mismatches are recorded as needing correction
            if (
                verdict.status == VerdictStatus.MISMATCH
                and severity_for(field_name) == SeverityClass.MINOR
            ):
                verdict = replace(verdict, status=VerdictStatus.NEEDS_CORRECTION)

            verdicts.append(verdict)
            items.append(ValidationItem(
                field_name=field_name,
                expected_value=expected_value,
                extracted_value=extracted_value or "",
                status=verdict.status,
                confidence=verdict.confidence,
                rationale=verdict.rationale,
                bounding_box=extracted.bounding_box if extracted else None,
                image_index=extracted.image_index if extracted else 0,
                extraction_confidence=extracted.confidence if extracted else 0.0,
            ))

        result = self.adjudicator.adjudicate(verdicts, category, container_size_ml)
        overall_confidence = aggregate_confidence(verdicts)

        auto_approved = (
            self.settings.auto_approval_enabled
            and result.disposition == Disposition.APPROVED
        )
        label_status = LabelStatus.APPROVED if auto_approved else LabelStatus.PENDING_REVIEW
        queue = classify_queue(
            label_status,
            result.disposition.value,
            overall_confidence,
            [item.status.value for item in items],
            self.settings.approval_confidence_threshold,
        )

        logger.info(
            f"Validation complete: disposition={result.disposition.value}, "
            f"confidence={overall_confidence}, fields={len(items)}, queue={queue.value}"
        )

        return ValidationOutcome(
            items=items,
            disposition=result.disposition,
            correction_window_days=result.correction_window_days,
            overall_confidence=overall_confidence,
            auto_approved=auto_approved,
            label_status=label_status,
            queue=queue,
            summary=self._generate_summary(items, result.disposition, result.reason),
        )

    def _generate_summary(
        self,
        items: List[ValidationItem],
        disposition: Disposition,
        reason: str,
    ) -> str:
        """Generate human-readable summary."""
        if disposition == Disposition.APPROVED:
            return "✅ All fields verified successfully. Label matches application data."

        issues = []
        for item in items:
            if item.status in (VerdictStatus.MISMATCH, VerdictStatus.NOT_FOUND):
                issues.append(f"❌ {item.field_name}: {item.rationale}")
            elif item.status == VerdictStatus.NEEDS_CORRECTION:
                issues.append(f"⚠️ {item.field_name}: {item.rationale}")

        if disposition == Disposition.REJECTED:
            header = f"❌ Rejected. {reason}"
        elif disposition == Disposition.NEEDS_CORRECTION:
            header = f"❌ Needs correction. {reason}"
        else:
            header = f"⚠️ Conditionally approved. {reason}"

        if not issues:
            return header
        return header + "\n" + "\n".join(issues)
