from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from typing import Any

from ..excel.dates import is_valid_serial, to_datetime
from ..models.data_point import IotDataPoint
from ..models.dataset import DatasetResult
from ..models.parse_error import ParseError, ParseErrorType

"""Row parser / dataset builder for the fixed IoT consumption layout.

Column layout (header row first, then one reading per row):

    plant | date serial | hour range | sensor name | consumed kW

Each row either becomes an IotDataPoint or exactly one ParseError. Row errors
are returned as values; a bad row never stops the rows after it.
"""

__all__ = [
    "EXPECTED_FIELDS",
    "coerce_number",
    "is_blank_row",
    "parse_row",
    "parse_dataset",
]

logger = logging.getLogger(__name__)

EXPECTED_FIELDS = ("plant", "date", "hour_range", "sensor_name", "consumed_kw")

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def coerce_number(value: Any) -> float:
    """Numeric coercion for a cell value; NaN when the value is not numeric.

    Blank strings coerce to 0.0 and booleans to 0.0/1.0, the usual spreadsheet
    number-coercion rules. Absent values (None) are NaN.
    """
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0.0
        if _NUMBER_RE.fullmatch(text):
            return float(text)
        return math.nan
    return math.nan


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(v is None or (isinstance(v, str) and v.strip() == "") for v in row)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def parse_row(row: Sequence[Any], row_index: int) -> IotDataPoint | ParseError:
    """Validate one data row. Checks run in a fixed order; the first failure wins."""
    if is_blank_row(row):
        return ParseError(row_index, ParseErrorType.MISSING_DATA, "Row has insufficient data")

    width = len(EXPECTED_FIELDS)
    padded = list(row[:width]) + [None] * (width - min(len(row), width))
    plant, date_value, hour_range, sensor_name, consumed_kw = padded

    if not is_valid_serial(date_value):
        return ParseError(row_index, ParseErrorType.INVALID_DATE, f"Invalid date value: {date_value}")
    date = to_datetime(date_value)

    if not _is_text(plant):
        return ParseError(row_index, ParseErrorType.INVALID_DATA, "Invalid plant name")
    if not _is_text(hour_range):
        return ParseError(row_index, ParseErrorType.INVALID_DATA, "Invalid hour range")
    if not _is_text(sensor_name):
        return ParseError(row_index, ParseErrorType.INVALID_DATA, "Invalid sensor name")

    kw = coerce_number(consumed_kw)
    if not math.isfinite(kw):
        return ParseError(
            row_index, ParseErrorType.INVALID_CONSUMPTION, f"Invalid consumedKW value: {consumed_kw}"
        )

    return IotDataPoint(
        plant=plant.strip(),
        date=date,
        hour_range=hour_range.strip(),
        sensor_name=sensor_name.strip(),
        consumed_kw=kw,
    )


def parse_dataset(grid: Sequence[Sequence[Any]]) -> DatasetResult:
    """Parse every data row of ``grid``; the first row is the header and is skipped.

    Rows are numbered from 1 (first data row) in error reports.
    """
    points: list[IotDataPoint] = []
    errors: list[ParseError] = []
    for index, row in enumerate(grid[1:], start=1):
        outcome = parse_row(row, index)
        if isinstance(outcome, ParseError):
            logger.debug("row %d rejected: %s %s", index, outcome.kind.value, outcome.message)
            errors.append(outcome)
        else:
            points.append(outcome)
    logger.info("parsed %d data rows: points=%d errors=%d", max(len(grid) - 1, 0), len(points), len(errors))
    return DatasetResult(points=tuple(points), errors=tuple(errors))
