"""Timestamp normalization for serialized itinerary items."""

from datetime import date, datetime, time, timezone
from typing import Optional

from dateutil import parser as dateutil_parser
from dateutil import tz

from itinerary_gaps.config import DEFAULT_TIMEZONE

_PLACEHOLDERS = ("", "null", "none", "unknown", "not specified")


def _localize(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz.gettz(DEFAULT_TIMEZONE) or timezone.utc)
    return dt


def parse_timestamp(raw) -> Optional[datetime]:
    """Parse a timestamp into an aware datetime, or None.

    Handles:
      - datetime / date objects (naive values get DEFAULT_TIMEZONE)
      - epoch milliseconds (int or float), as emitted by JSON serializers
      - ISO 8601 strings ("2024-06-01T10:00:00Z", "2024-06-01 10:00")
      - anything else dateutil understands ("1 June 2024 10:00")
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, datetime):
        return _localize(raw)

    if isinstance(raw, date):
        return _localize(datetime.combine(raw, time.min))

    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None

    if not isinstance(raw, str) or raw.strip().lower() in _PLACEHOLDERS:
        return None

    raw = raw.strip()

    # 1. Strict ISO 8601 first, the format storage layers emit
    try:
        return _localize(dateutil_parser.isoparse(raw))
    except (ValueError, OverflowError):
        pass

    # 2. dateutil as general fallback
    try:
        return _localize(dateutil_parser.parse(raw))
    except (ValueError, OverflowError):
        pass

    return None
