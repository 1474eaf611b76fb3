"""Correction deadlines, lazy deadline expiry and review-queue classification."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence
from dataclasses import dataclass
from enum import Enum
import logging

from .adjudication import Disposition
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


class LabelStatus(str, Enum):
    """Stored status of a label application."""
    PENDING = "pending"
    PROCESSING = "processing"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    CONDITIONALLY_APPROVED = "conditionally_approved"
    NEEDS_CORRECTION = "needs_correction"
    REJECTED = "rejected"


class Urgency(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    EXPIRED = "expired"


class QueueCategory(str, Enum):
    READY = "ready"
    REVIEW = "review"
    OTHER = "other"


@dataclass(frozen=True)
class DeadlineInfo:
    days_remaining: int
    urgency: Urgency


def _utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _now(now: Optional[datetime]) -> datetime:
    return _utc(now) if now else datetime.now(timezone.utc)


def correction_window_days(
    disposition: Disposition,
    settings: Optional[Settings] = None,
) -> Optional[int]:
    """Correction window for a disposition: 7 days conditional, 30 needs-correction."""
    settings = settings or get_settings()
    if disposition == Disposition.CONDITIONALLY_APPROVED:
        return settings.conditional_deadline_days
    if disposition == Disposition.NEEDS_CORRECTION:
        return settings.correction_deadline_days
    return None


def compute_correction_deadline(
    disposition: Disposition,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> Optional[datetime]:
    """Absolute correction deadline (now + window), or None when no window applies."""
    days = correction_window_days(disposition, settings)
    if days is None:
        return None
    return _now(now) + timedelta(days=days)


def effective_status(
    status: LabelStatus,
    deadline: Optional[datetime],
    deadline_expired: bool = False,
    now: Optional[datetime] = None,
) -> LabelStatus:
    """
    Status after applying lazy deadline expiry.

    - needs_correction past its deadline -> rejected
    - conditionally_approved past its deadline -> needs_correction
    - anything else is unchanged

    Naive datetimes are treated as UTC.
    """
    status = LabelStatus(status)
    if deadline is None:
        return status

    if not (deadline_expired or _utc(deadline) <= _now(now)):
        return status

    if status == LabelStatus.NEEDS_CORRECTION:
        return LabelStatus.REJECTED
    if status == LabelStatus.CONDITIONALLY_APPROVED:
        return LabelStatus.NEEDS_CORRECTION
    return status


def deadline_info(deadline: Optional[datetime], now: Optional[datetime] = None) -> Optional[DeadlineInfo]:
    """
    Days remaining and color-coded urgency for a deadline.

    - expired: deadline has passed
    - red: less than 24 hours remaining
    - amber: 7 days or fewer remaining
    - green: more than 7 days remaining
    """
    if deadline is None:
        return None

    remaining = _utc(deadline) - _now(now)
    remaining_seconds = remaining.total_seconds()
    if remaining_seconds <= 0:
        return DeadlineInfo(days_remaining=0, urgency=Urgency.EXPIRED)

    # Partial days count as a full day remaining
    days_remaining = -int(-remaining_seconds // 86400)

    if remaining_seconds < 86400:
        urgency = Urgency.RED
    elif days_remaining <= 7:
        urgency = Urgency.AMBER
    else:
        urgency = Urgency.GREEN

    return DeadlineInfo(days_remaining=days_remaining, urgency=urgency)


def classify_queue(
    status: LabelStatus,
    ai_proposed_status: Optional[str],
    overall_confidence: Optional[int],
    item_statuses: Sequence[str],
    approval_threshold: int,
) -> QueueCategory:
    """
    Place a label in the specialist queue.

    Only pending_review labels are queued. A label is ready for batch
    approval when the proposed disposition is approved, the overall
    confidence meets the threshold and every field matched.
    """
    if LabelStatus(status) != LabelStatus.PENDING_REVIEW:
        return QueueCategory.OTHER

    proposed_approved = ai_proposed_status == Disposition.APPROVED.value
    meets_threshold = overall_confidence is not None and overall_confidence >= approval_threshold
    all_match = bool(item_statuses) and all(s == "match" for s in item_statuses)

    if proposed_approved and meets_threshold and all_match:
        return QueueCategory.READY
    return QueueCategory.REVIEW
