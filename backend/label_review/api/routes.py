"""API route definitions."""

import time
from fastapi import APIRouter, HTTPException
from typing import Dict, List, Optional, Union
import logging

from ..models import (
    CompareRequest,
    FieldVerdictResult,
    AdjudicateRequest,
    AdjudicateResponse,
    BoundingBoxModel,
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
from ..services import (
    FieldComparator,
    FieldVerdict,
    StatusAdjudicator,
    ValidationPipeline,
    ValidationOutcome,
    SequentialBatchValidator,
    BatchItem,
    BoundingBox,
    ExtractedField,
    Disposition,
    aggregate_confidence,
    build_expected_fields,
    compute_correction_deadline,
)
from ..services.normalization import parse_container_size_ml
from ..config import get_settings
from .. import __version__

logger = logging.getLogger(__name__)
router = APIRouter()

# Initialize services
comparator = FieldComparator()
adjudicator = StatusAdjudicator()
pipeline = ValidationPipeline()
batch_validator = SequentialBatchValidator()


def _resolve_container_size(value: Optional[Union[float, str]]) -> Optional[float]:
    """Container size in mL; raises ValueError for text that is not a size."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    size = parse_container_size_ml(value)
    if size is None:
        raise ValueError(f"Unrecognized container size: {value!r}")
    return float(size)


def _to_extracted_fields(request: ValidateRequest) -> List[ExtractedField]:
    return [
        ExtractedField(
            field_name=f.field_name,
            value=f.value,
            confidence=f.confidence,
            bounding_box=BoundingBox(**f.bounding_box.model_dump()) if f.bounding_box else None,
            image_index=f.image_index,
        )
        for f in request.extracted_fields
    ]


def _to_result(outcome: ValidationOutcome, processing_time_ms: int) -> ValidationResult:
    """Convert a pipeline outcome to the response model."""
    items = [
        ValidationItemResult(
            field_name=item.field_name,
            expected_value=item.expected_value,
            extracted_value=item.extracted_value,
            status=item.status,
            confidence=item.confidence,
            rationale=item.rationale,
            bounding_box=BoundingBoxModel(**vars(item.bounding_box)) if item.bounding_box else None,
            image_index=item.image_index,
            extraction_confidence=item.extraction_confidence,
        )
        for item in outcome.items
    ]

    return ValidationResult(
        disposition=outcome.disposition,
        correction_window_days=outcome.correction_window_days,
        correction_deadline=compute_correction_deadline(outcome.disposition),
        overall_confidence=outcome.overall_confidence,
        auto_approved=outcome.auto_approved,
        label_status=outcome.label_status,
        queue=outcome.queue,
        summary=outcome.summary,
        items=items,
        processing_time_ms=processing_time_ms,
    )


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health."""
    return HealthResponse(status="healthy", version=__version__)


@router.post(
    "/compare",
    response_model=FieldVerdictResult,
    tags=["Comparison"]
)
async def compare(request: CompareRequest):
    """
    Compare one declared field value against the value read off the label.

    The match strategy defaults to the field's configured strategy and can
    be overridden with `match_type`.
    """
    verdict = comparator.compare(
        request.field_name,
        request.expected_value,
        request.extracted_value,
        match_type=request.match_type,
    )
    return FieldVerdictResult(
        field_name=verdict.field_name,
        status=verdict.status,
        confidence=verdict.confidence,
        rationale=verdict.rationale,
        strategy=verdict.strategy,
    )


@router.post(
    "/adjudicate",
    response_model=AdjudicateResponse,
    tags=["Adjudication"]
)
async def adjudicate(request: AdjudicateRequest):
    """
    Roll a set of field verdicts up into an overall disposition.

    Returns the disposition, the correction window in days and the
    resulting deadline measured from now.
    """
    verdicts = [
        FieldVerdict(
            field_name=v.field_name,
            status=v.status,
            confidence=v.confidence,
            rationale=v.rationale,
        )
        for v in request.verdicts
    ]

    result = adjudicator.adjudicate(verdicts, request.category, request.container_size_ml)

    return AdjudicateResponse(
        disposition=result.disposition,
        correction_window_days=result.correction_window_days,
        correction_deadline=compute_correction_deadline(result.disposition),
        overall_confidence=aggregate_confidence(verdicts),
        reason=result.reason,
    )


@router.post(
    "/validate",
    response_model=ValidationResponse,
    tags=["Validation"]
)
async def validate(request: ValidateRequest):
    """
    Validate one label application.

    Builds the expected fields from the application data, compares each one
    against the extraction output and adjudicates the result.
    """
    start_time = time.time()

    try:
        container_size_ml = _resolve_container_size(request.container_size_ml)
    except ValueError as e:
        return ValidationResponse(success=False, error=str(e))

    try:
        expected = build_expected_fields(request.application_data, request.category)
        outcome = pipeline.run(
            expected_fields=expected,
            extracted_fields=_to_extracted_fields(request),
            category=request.category,
            container_size_ml=container_size_ml,
        )
    except Exception as e:
        logger.exception(f"Error validating application: {e}")
        return ValidationResponse(
            success=False,
            error=f"Error validating application: {str(e)}"
        )

    total_time = int((time.time() - start_time) * 1000)
    logger.info(f"Validated application in {total_time}ms: {outcome.disposition.value}")

    return ValidationResponse(success=True, result=_to_result(outcome, total_time))


@router.post(
    "/validate/batch",
    response_model=BatchValidationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        500: {"model": ErrorResponse, "description": "Processing error"}
    },
    tags=["Validation"]
)
async def validate_batch(request: BatchValidateRequest):
    """
    Validate several label applications.

    Each application is validated independently; a failure in one is
    reported on its row and does not affect the others.
    """
    start_time = time.time()
    settings = get_settings()

    # Check batch size limit
    if len(request.applications) > settings.max_batch_size:
        raise HTTPException(
            status_code=400,
            detail=f"Too many applications. Maximum batch size is {settings.max_batch_size}."
        )

    # Rows rejected before validation, keyed by position in the request
    invalid_rows: Dict[int, BatchRowResult] = {}
    items: List[BatchItem] = []

    for index, application in enumerate(request.applications):
        application_id = application.application_id or f"application-{index + 1}"
        try:
            container_size_ml = _resolve_container_size(application.container_size_ml)
        except ValueError as e:
            invalid_rows[index] = BatchRowResult(
                application_id=application_id,
                success=False,
                error=str(e)
            )
            continue

        items.append(BatchItem(
            application_id=application_id,
            category=application.category,
            application_data=application.application_data,
            extracted_fields=_to_extracted_fields(application),
            container_size_ml=container_size_ml,
        ))

    try:
        results = batch_validator.process_batch(items)
    except Exception as e:
        logger.exception(f"Batch processing error: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Batch processing failed: {str(e)}"
        )

    counts = {disposition: 0 for disposition in Disposition}
    failed_count = len(invalid_rows)
    validated_rows: List[BatchRowResult] = []

    for r in results:
        if r.success and r.outcome:
            counts[r.outcome.disposition] += 1
            validated_rows.append(BatchRowResult(
                application_id=r.application_id,
                success=True,
                result=_to_result(r.outcome, r.processing_time_ms),
            ))
        else:
            failed_count += 1
            validated_rows.append(BatchRowResult(
                application_id=r.application_id,
                success=False,
                error=r.error or "Unknown error"
            ))

    # Restore request order
    validated = iter(validated_rows)
    batch_results = [
        invalid_rows[index] if index in invalid_rows else next(validated)
        for index in range(len(request.applications))
    ]

    processing_time = int((time.time() - start_time) * 1000)

    return BatchValidationResponse(
        success=True,
        total=len(request.applications),
        processed=len(results),
        approved=counts[Disposition.APPROVED],
        conditionally_approved=counts[Disposition.CONDITIONALLY_APPROVED],
        needs_correction=counts[Disposition.NEEDS_CORRECTION],
        rejected=counts[Disposition.REJECTED],
        failed=failed_count,
        results=batch_results,
        processing_time_ms=processing_time
    )
