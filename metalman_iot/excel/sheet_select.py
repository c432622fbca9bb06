from __future__ import annotations

import re
from collections.abc import Iterable

from ..models.sheet import Sheet, WorkBook

"""Worksheet lookup by a human-provided name.

Names are compared case-insensitively, ignoring punctuation and whitespace, so
"Master_Data" finds a sheet called "  master data  ".
"""

__all__ = [
    "WorksheetNotFoundError",
    "normalize_sheet_name",
    "match_sheet_name",
    "select_sheet",
]

_NON_ALNUM_SPACE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


class WorksheetNotFoundError(LookupError):
    """Raised when no sheet in the workbook matches the requested name."""

    def __init__(self, target: str, available: Iterable[str]) -> None:
        self.target = target
        self.available = list(available)
        super().__init__(f"worksheet not found: '{target}' (available: {self.available})")


def normalize_sheet_name(name: str) -> str:
    """Trim, lowercase and drop everything but ASCII letters, digits and whitespace."""
    return _NON_ALNUM_SPACE.sub("", name.strip().lower())


def _compare_key(name: str) -> str:
    # punctuation such as "_" disappears during normalization, so spacing must not matter either
    return _WHITESPACE.sub("", normalize_sheet_name(name))


def match_sheet_name(target: str, names: Iterable[str]) -> str | None:
    """Return the first original name matching ``target``, or None."""
    key = _compare_key(target)
    for name in names:
        if _compare_key(name) == key:
            return name
    return None


def select_sheet(workbook: WorkBook, target: str) -> Sheet:
    """Resolve ``target`` against the workbook's sheet names.

    Raises:
        WorksheetNotFoundError: no sheet matches
    """
    name = match_sheet_name(target, workbook.sheet_names)
    if name is None:
        raise WorksheetNotFoundError(target, workbook.sheet_names)
    return workbook.sheet(name)
