"""Batch validation of multiple label applications."""

import time
import logging
from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass, field

from .pipeline import ExtractedField, ValidationOutcome, ValidationPipeline, build_expected_fields
from .regulations import BeverageCategory
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    """One application in a batch."""
    application_id: str
    category: BeverageCategory
    application_data: Dict[str, Any]
    extracted_fields: List[ExtractedField] = field(default_factory=list)
    container_size_ml: Optional[float] = None


@dataclass
class BatchItemResult:
    """Outcome for one application in a batch."""
    application_id: str
    success: bool
    outcome: Optional[ValidationOutcome] = None
    error: Optional[str] = None
    processing_time_ms: int = 0


class SequentialBatchValidator:
    """
    Validate a batch of applications one after another.

    A failure in one application is reported on its result and does not
    stop the rest of the batch.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.pipeline = ValidationPipeline(self.settings)

    def process_batch(self, items: Sequence[BatchItem]) -> List[BatchItemResult]:
        """
        Process batch sequentially.

        Args:
            items: Applications with their extraction output

        Returns:
            One BatchItemResult per item, in input order
        """
        results = []

        for item in items:
            start_time = time.time()

            try:
                expected = build_expected_fields(item.application_data, item.category)
                outcome = self.pipeline.run(
                    expected_fields=expected,
                    extracted_fields=item.extracted_fields,
                    category=item.category,
                    container_size_ml=item.container_size_ml,
                )
                results.append(BatchItemResult(
                    application_id=item.application_id,
                    success=True,
                    outcome=outcome,
                    processing_time_ms=int((time.time() - start_time) * 1000),
                ))
            except Exception as e:
                logger.exception(f"Error validating {item.application_id}: {e}")
                results.append(BatchItemResult(
                    application_id=item.application_id,
                    success=False,
                    error=f"Processing error: {str(e)}",
                    processing_time_ms=int((time.time() - start_time) * 1000),
                ))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Batch complete: {succeeded}/{len(results)} applications validated")
        return results
