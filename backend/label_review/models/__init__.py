"""Pydantic models for request/response schemas."""

from .schemas import (
    CompareRequest,
    FieldVerdictResult,
    VerdictInput,
    AdjudicateRequest,
    AdjudicateResponse,
    BoundingBoxModel,
    ExtractedFieldInput,
    ValidateRequest,
    ValidationItemResult,
    ValidationResult,
    ValidationResponse,
    BatchValidateRequest,
    BatchRowResult,
    BatchValidationResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "CompareRequest",
    "FieldVerdictResult",
    "VerdictInput",
    "AdjudicateRequest",
    "AdjudicateResponse",
    "BoundingBoxModel",
    "ExtractedFieldInput",
    "ValidateRequest",
    "ValidationItemResult",
    "ValidationResult",
    "ValidationResponse",
    "BatchValidateRequest",
    "BatchRowResult",
    "BatchValidationResponse",
    "ErrorResponse",
    "HealthResponse",
]
