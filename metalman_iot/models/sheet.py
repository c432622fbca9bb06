from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

"""Decoded workbook structures (sheet-of-cells representation).

These mirror what a spreadsheet decoding library hands over: named sheets, each
with a sparse coordinate -> cell mapping, a declared used range and a list of
merge rectangles. All coordinates are 0-based (row, col); ranges are inclusive.
"""

__all__ = [
    "CellRecord",
    "UsedRange",
    "MergeRect",
    "Sheet",
    "WorkBook",
    "Coord",
]

Coord = tuple[int, int]


@dataclass(frozen=True)
class CellRecord:
    """Single decoded cell. ``value`` is str / int / float / bool or None (absent)."""
    value: Any = None


@dataclass(frozen=True)
class UsedRange:
    """Minimal rectangle a sheet declares as containing data (inclusive)."""
    min_row: int
    min_col: int
    max_row: int
    max_col: int

    @property
    def rows(self) -> int:
        return max(0, self.max_row - self.min_row + 1)

    @property
    def cols(self) -> int:
        return max(0, self.max_col - self.min_col + 1)

    @property
    def is_empty(self) -> bool:
        return self.rows == 0 or self.cols == 0

    def coords(self):
        """Yield every coordinate row-major."""
        for r in range(self.min_row, self.max_row + 1):
            for c in range(self.min_col, self.max_col + 1):
                yield (r, c)


@dataclass(frozen=True)
class MergeRect:
    """Merged region; the logical value lives at (start_row, start_col)."""
    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def anchor(self) -> Coord:
        return (self.start_row, self.start_col)

    def coords(self):
        for r in range(self.start_row, self.end_row + 1):
            for c in range(self.start_col, self.end_col + 1):
                yield (r, c)


@dataclass(frozen=True)
class Sheet:
    """Raw sheet as delivered by the decoder. Treated as read-only input."""
    name: str
    cells: Mapping[Coord, CellRecord] = field(default_factory=dict)
    used_range: UsedRange | None = None
    merges: tuple[MergeRect, ...] = ()

    def value_at(self, row: int, col: int) -> Any:
        rec = self.cells.get((row, col))
        return None if rec is None else rec.value

    @classmethod
    def from_rows(cls, name: str, rows: list[list[Any]], merges: list[MergeRect] | None = None) -> Sheet:
        """Build a sheet anchored at (0, 0) from a list of rows.

        ``None`` entries are left out of the sparse cell map. Used mainly for
        wrapping an already-normalized grid back into a sheet.
        """
        cells: dict[Coord, CellRecord] = {}
        width = max((len(r) for r in rows), default=0)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is not None:
                    cells[(r, c)] = CellRecord(value)
        used = UsedRange(0, 0, len(rows) - 1, width - 1) if rows and width else None
        return cls(name=name, cells=cells, used_range=used, merges=tuple(merges or ()))


@dataclass(frozen=True)
class WorkBook:
    """Named sheets in workbook order."""
    sheet_names: tuple[str, ...]
    sheets: Mapping[str, Sheet]

    def sheet(self, name: str) -> Sheet:
        return self.sheets[name]
