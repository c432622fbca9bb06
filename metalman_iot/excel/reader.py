from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Any

from openpyxl import load_workbook as _openpyxl_load

from ..models.sheet import CellRecord, Coord, MergeRect, Sheet, UsedRange, WorkBook
from .dates import coerce_to_serial

"""Workbook decoding boundary.

Turns an .xlsx file (path or in-memory bytes) into the WorkBook structure the
normalizer consumes. openpyxl does the binary decoding; this module only maps
its worksheets onto sparse cells, merge rectangles (0-based, inclusive) and a
used range.

Date cells come back from openpyxl as datetime objects; they are converted to
date serials here so the row parser always sees raw serial numbers.
"""

__all__ = [
    "WorkbookReadError",
    "load_workbook",
    "sheet_from_worksheet",
]

logger = logging.getLogger(__name__)


class WorkbookReadError(Exception):
    """Raised when the file cannot be opened or decoded as a workbook."""


def sheet_from_worksheet(ws: Any) -> Sheet:
    """Map one openpyxl worksheet onto a Sheet."""
    merges = tuple(
        MergeRect(
            start_row=int(cr.min_row) - 1,
            start_col=int(cr.min_col) - 1,
            end_row=int(cr.max_row) - 1,
            end_col=int(cr.max_col) - 1,
        )
        for cr in ws.merged_cells.ranges
    )

    cells: dict[Coord, CellRecord] = {}
    for row in ws.iter_rows():
        for cell in row:
            value = getattr(cell, "value", None)
            if value is None:
                continue
            cells[(cell.row - 1, cell.column - 1)] = CellRecord(coerce_to_serial(value))

    used: UsedRange | None = None
    if cells or merges:
        used = UsedRange(
            min_row=int(ws.min_row) - 1,
            min_col=int(ws.min_column) - 1,
            max_row=int(ws.max_row) - 1,
            max_col=int(ws.max_column) - 1,
        )
    return Sheet(name=str(ws.title), cells=cells, used_range=used, merges=merges)


def load_workbook(source: Path | str | bytes) -> WorkBook:
    """Decode an .xlsx workbook from a path or raw bytes.

    Raises:
        WorkbookReadError: file missing or not a readable workbook
    """
    if isinstance(source, bytes):
        handle: Any = BytesIO(source)
        label = "<bytes>"
    else:
        path = Path(source)
        if not path.exists():
            raise WorkbookReadError(f"file not found: {path}")
        handle = path
        label = path.name

    try:
        wb = _openpyxl_load(filename=handle, data_only=True, read_only=False)
    except Exception as e:
        # zip, XML and cell-value errors from malformed parts all surface here
        raise WorkbookReadError(f"cannot read workbook {label}: {e}") from e

    try:
        sheets = {str(ws.title): sheet_from_worksheet(ws) for ws in wb.worksheets}
    finally:
        wb.close()
    logger.debug("loaded workbook %s sheets=%s", label, list(sheets))
    return WorkBook(sheet_names=tuple(sheets), sheets=sheets)
