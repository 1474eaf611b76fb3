"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Any, Optional, Union

from ..services.regulations import BeverageCategory
from ..services.comparison import MatchStrategy, VerdictStatus
from ..services.adjudication import Disposition
from ..services.deadlines import LabelStatus, QueueCategory


class CompareRequest(BaseModel):
    """Request body for comparing a single field."""
    field_name: str = Field(..., min_length=1, description="Field identifier, e.g. brand_name")
    expected_value: str = Field(..., description="Value declared in the application")
    extracted_value: Optional[str] = Field(None, description="Value read off the label (null if not found)")
    match_type: Optional[MatchStrategy] = Field(None, description="Override the field's default strategy")

    class Config:
        json_schema_extra = {
            "example": {
                "field_name": "alcohol_content",
                "expected_value": "45% Alc./Vol.",
                "extracted_value": "90 Proof",
                "match_type": None
            }
        }


class FieldVerdictResult(BaseModel):
    """Verdict for a single field."""
    field_name: str
    status: VerdictStatus
    confidence: int = Field(..., ge=0, le=100)
    rationale: str
    strategy: Optional[MatchStrategy] = None


class VerdictInput(BaseModel):
    """A previously computed field verdict submitted for adjudication."""
    field_name: str = Field(..., min_length=1)
    status: VerdictStatus
    confidence: int = Field(0, ge=0, le=100)
    rationale: str = ""


class AdjudicateRequest(BaseModel):
    """Request body for adjudicating a verdict set."""
    verdicts: list[VerdictInput]
    category: BeverageCategory
    container_size_ml: Optional[float] = Field(None, gt=0, description="Declared container size in mL")

    class Config:
        json_schema_extra = {
            "example": {
                "verdicts": [
                    {"field_name": "brand_name", "status": "mismatch", "confidence": 62},
                    {"field_name": "class_type", "status": "match", "confidence": 100}
                ],
                "category": "wine",
                "container_size_ml": 750
            }
        }


class AdjudicateResponse(BaseModel):
    """Overall disposition for a verdict set."""
    disposition: Disposition
    correction_window_days: Optional[int] = None
    correction_deadline: Optional[datetime] = None
    overall_confidence: int = Field(..., ge=0, le=100)
    reason: str


class BoundingBoxModel(BaseModel):
    x: float
    y: float
    width: float
    height: float
    angle: float = 0.0


class ExtractedFieldInput(BaseModel):
    """One field from the extraction step."""
    field_name: str = Field(..., min_length=1)
    value: Optional[str] = None
    confidence: float = Field(0.0, ge=0.0, le=100.0)
    bounding_box: Optional[BoundingBoxModel] = None
    image_index: int = Field(0, ge=0)


class ValidateRequest(BaseModel):
    """Application data plus extraction output for one label."""
    application_id: Optional[str] = None
    category: BeverageCategory
    container_size_ml: Optional[Union[float, str]] = Field(
        None, description="Declared container size, e.g. 750 or '750 mL'"
    )
    application_data: dict[str, Any] = Field(default_factory=dict)
    extracted_fields: list[ExtractedFieldInput] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "category": "distilled_spirits",
                "container_size_ml": "750 mL",
                "application_data": {
                    "brandName": "Old Tom Distillery",
                    "classType": "Kentucky Straight Bourbon Whiskey",
                    "alcoholContent": "45% Alc./Vol.",
                    "netContents": "750 mL"
                },
                "extracted_fields": [
                    {"field_name": "brand_name", "value": "OLD TOM DISTILLERY", "confidence": 97},
                    {"field_name": "alcohol_content", "value": "90 Proof", "confidence": 92}
                ]
            }
        }


class ValidationItemResult(BaseModel):
    """Per-field result of validating a label."""
    field_name: str
    expected_value: str
    extracted_value: str
    status: VerdictStatus
    confidence: int = Field(..., ge=0, le=100)
    rationale: str
    bounding_box: Optional[BoundingBoxModel] = None
    image_index: int = 0
    extraction_confidence: float = Field(0.0, description="Confidence reported by the extraction step")


class ValidationResult(BaseModel):
    """Overall validation result for a label."""
    disposition: Disposition
    correction_window_days: Optional[int] = None
    correction_deadline: Optional[datetime] = None
    overall_confidence: int = Field(..., ge=0, le=100)
    auto_approved: bool
    label_status: LabelStatus
    queue: QueueCategory
    summary: str
    items: list[ValidationItemResult]
    processing_time_ms: int


class ValidationResponse(BaseModel):
    """Response for single label validation."""
    success: bool
    result: Optional[ValidationResult] = None
    error: Optional[str] = None


class BatchValidateRequest(BaseModel):
    """Request body for validating several labels."""
    applications: list[ValidateRequest]


class BatchRowResult(BaseModel):
    """Result for a single application in batch validation."""
    application_id: str
    success: bool
    result: Optional[ValidationResult] = None
    error: Optional[str] = None


class BatchValidationResponse(BaseModel):
    """Response for batch validation."""
    success: bool
    total: int
    processed: int
    approved: int
    conditionally_approved: int
    needs_correction: int
    rejected: int
    failed: int
    results: list[BatchRowResult]
    processing_time_ms: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
