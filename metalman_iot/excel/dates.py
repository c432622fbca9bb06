from __future__ import annotations

import math
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

"""Spreadsheet date-serial helpers.

Convention: serial 25569 is 1970-01-01T00:00:00Z; the fractional part is the
time of day as a fraction of 86,400,000 ms. Results are timezone-aware UTC.
"""

__all__ = [
    "EXCEL_DATE_OFFSET",
    "MILLISECONDS_PER_DAY",
    "to_datetime",
    "to_serial",
    "is_valid_serial",
    "coerce_to_serial",
]

EXCEL_DATE_OFFSET = 25569
MILLISECONDS_PER_DAY = 86_400_000

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def to_datetime(serial: float) -> datetime:
    """Convert a date serial to a UTC datetime.

    Raises:
        ValueError: serial is not finite
        OverflowError: the instant is outside the representable datetime range
    """
    if not math.isfinite(serial):
        raise ValueError(f"non-finite date serial: {serial}")
    return _EPOCH + timedelta(milliseconds=(serial - EXCEL_DATE_OFFSET) * MILLISECONDS_PER_DAY)


def to_serial(value: datetime) -> float:
    """Convert a datetime to a date serial. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH) / timedelta(days=1) + EXCEL_DATE_OFFSET


def is_valid_serial(value: Any) -> bool:
    """True when ``value`` is a number that converts to a representable instant."""
    # bool is an int subclass but never a date serial
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        to_datetime(value)
    except (ValueError, OverflowError):
        return False
    return True


def coerce_to_serial(value: Any) -> Any:
    """Turn decoder-materialized date/time objects back into serial numbers.

    Other values pass through unchanged.
    """
    if isinstance(value, datetime):
        return to_serial(value)
    if isinstance(value, date):
        return to_serial(datetime(value.year, value.month, value.day))
    if isinstance(value, time):
        seconds = value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1_000_000
        return seconds / 86_400
    return value
