"""Status adjudication.

Rolls the per-field verdicts of one application up into a single
disposition with an optional correction window.
"""

import math
from typing import Iterable, Optional, Sequence
from dataclasses import dataclass
from enum import Enum
import logging

from .comparison import FieldVerdict, VerdictStatus
from .regulations import (
    BeverageCategory,
    SeverityClass,
    is_mandatory,
    is_valid_size,
    severity_for,
)
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


class Disposition(str, Enum):
    """Overall outcome of adjudicating an application."""
    APPROVED = "approved"
    CONDITIONALLY_APPROVED = "conditionally_approved"
    NEEDS_CORRECTION = "needs_correction"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AdjudicationResult:
    """Disposition plus correction window in days (None when not applicable)."""
    disposition: Disposition
    correction_window_days: Optional[int] = None
    reason: str = ""


@dataclass
class _Flags:
    must_reject: bool = False
    substantive: bool = False
    minor: bool = False


class StatusAdjudicator:
    """
    Computes the overall disposition for one application.

    Stateless: every call recomputes from the verdicts it is given.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def adjudicate(
        self,
        verdicts: Sequence[FieldVerdict],
        category: BeverageCategory,
        container_size_ml: Optional[float] = None,
    ) -> AdjudicationResult:
        """
        Determine the overall disposition.

        Precedence: a rejection-class failure (or an illegal container size)
        rejects; a substantive failure needs correction; a minor
        discrepancy is conditionally approved; otherwise approved.

        Args:
            verdicts: Per-field comparison verdicts
            category: Declared beverage category
            container_size_ml: Declared container size; the size gate is
                skipped when None

        Returns:
            AdjudicationResult with disposition and correction window
        """
        category = BeverageCategory(category)

        if container_size_ml is not None and not is_valid_size(category, container_size_ml):
            logger.info(f"Container size {container_size_ml:g} mL is not legal for {category.value}")
            return AdjudicationResult(
                disposition=Disposition.REJECTED,
                reason=f"Container size {container_size_ml:g} mL is not an authorized size for {category.value}.",
            )

        flags = self._classify(verdicts, category)

        if flags.must_reject:
            result = AdjudicationResult(
                disposition=Disposition.REJECTED,
                reason="A rejection-triggering field failed.",
            )
        elif flags.substantive:
            result = AdjudicationResult(
                disposition=Disposition.NEEDS_CORRECTION,
                correction_window_days=self.settings.correction_deadline_days,
                reason="A mandatory field is missing or does not match.",
            )
        elif flags.minor:
            result = AdjudicationResult(
                disposition=Disposition.CONDITIONALLY_APPROVED,
                correction_window_days=self.settings.conditional_deadline_days,
                reason="Minor discrepancies found.",
            )
        else:
            result = AdjudicationResult(
                disposition=Disposition.APPROVED,
                reason="All checked fields match.",
            )

        logger.info(f"Adjudicated {len(verdicts)} fields for {category.value}: {result.disposition.value}")
        return result

    def _classify(self, verdicts: Iterable[FieldVerdict], category: BeverageCategory) -> _Flags:
        flags = _Flags()

        for verdict in verdicts:
            if verdict.status == VerdictStatus.MATCH:
                continue

            severity = severity_for(verdict.field_name)
            mandatory = is_mandatory(verdict.field_name, category)

            if severity == SeverityClass.REJECTION:
                flags.must_reject = True
                continue

            if verdict.status == VerdictStatus.NOT_FOUND:
                # Optional fields may legitimately be absent
                if not mandatory:
                    continue
                if severity == SeverityClass.MINOR:
                    flags.minor = True
                else:
                    flags.substantive = True
                continue

            # MISMATCH or NEEDS_CORRECTION
            if severity == SeverityClass.STANDARD and mandatory:
                flags.substantive = True
            else:
                flags.minor = True

        return flags


def aggregate_confidence(verdicts: Sequence[FieldVerdict]) -> int:
    """Mean verdict confidence rounded half up; 0 when there are no verdicts."""
    if not verdicts:
        return 0
    mean = sum(v.confidence for v in verdicts) / len(verdicts)
    return int(math.floor(mean + 0.5))


_default_adjudicator: Optional[StatusAdjudicator] = None


def adjudicate(
    verdicts: Sequence[FieldVerdict],
    category: BeverageCategory,
    container_size_ml: Optional[float] = None,
) -> AdjudicationResult:
    """Adjudicate using the default adjudicator (see StatusAdjudicator.adjudicate)."""
    global _default_adjudicator
    if _default_adjudicator is None:
        _default_adjudicator = StatusAdjudicator()
    return _default_adjudicator.adjudicate(verdicts, category, container_size_ml)

