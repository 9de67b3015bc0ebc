"""Elapsed-time helpers and severity thresholds for gap detection."""

import math
from datetime import datetime, timedelta

from itinerary_gaps.config import (
    GAP_ERROR_MINUTES,
    LODGING_GAP_WARNING_MINUTES,
    TIME_GAP_WARNING_MINUTES,
)
from itinerary_gaps.models import Severity

_ONE_MINUTE = timedelta(minutes=1)


def minutes_between(earlier: datetime, later: datetime) -> int:
    """Whole minutes from ``earlier`` to ``later``, floored. Negative if out of order."""
    return (later - earlier) // _ONE_MINUTE


def classify_time_gap_severity(minutes: int) -> Severity:
    if minutes > GAP_ERROR_MINUTES:
        return Severity.ERROR
    if minutes > TIME_GAP_WARNING_MINUTES:
        return Severity.WARNING
    return Severity.INFO


def classify_missing_lodging_severity(minutes: int) -> Severity:
    if minutes > GAP_ERROR_MINUTES:
        return Severity.ERROR
    if minutes > LODGING_GAP_WARNING_MINUTES:
        return Severity.WARNING
    return Severity.INFO


def format_duration_words(minutes: int) -> str:
    """Render as "4h 0m", or "45 minutes" when under an hour."""
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins} minutes"


def nights_spanned(minutes: int) -> int:
    hours = minutes // 60
    return math.ceil(hours / 24)
