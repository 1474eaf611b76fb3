"""Services for field comparison, adjudication, deadlines and batch validation."""

from .regulations import (
    FieldName,
    BeverageCategory,
    SeverityClass,
    CATEGORY_RULES,
    FIELD_SEVERITY,
    QUALIFYING_PHRASES,
    HEALTH_WARNING_FULL,
    mandatory_fields,
    is_valid_size,
    severity_for,
    check_health_warning,
)
from .comparison import FieldComparator, FieldVerdict, VerdictStatus, MatchStrategy, compare_field
from .adjudication import StatusAdjudicator, AdjudicationResult, Disposition, adjudicate, aggregate_confidence
from .deadlines import LabelStatus, QueueCategory, compute_correction_deadline, effective_status, deadline_info
from .pipeline import ValidationPipeline, ValidationOutcome, ValidationItem, ExtractedField, BoundingBox, build_expected_fields
from .batch import SequentialBatchValidator, BatchItem, BatchItemResult

__all__ = [
    "FieldName",
    "BeverageCategory",
    "SeverityClass",
    "CATEGORY_RULES",
    "FIELD_SEVERITY",
    "QUALIFYING_PHRASES",
    "HEALTH_WARNING_FULL",
    "mandatory_fields",
    "is_valid_size",
    "severity_for",
    "check_health_warning",
    "FieldComparator",
    "FieldVerdict",
    "VerdictStatus",
    "MatchStrategy",
    "compare_field",
    "StatusAdjudicator",
    "AdjudicationResult",
    "Disposition",
    "adjudicate",
    "aggregate_confidence",
    "LabelStatus",
    "QueueCategory",
    "compute_correction_deadline",
    "effective_status",
    "deadline_info",
    "ValidationPipeline",
    "ValidationOutcome",
    "ValidationItem",
    "ExtractedField",
    "BoundingBox",
    "build_expected_fields",
    "SequentialBatchValidator",
    "BatchItem",
    "BatchItemResult",
]
