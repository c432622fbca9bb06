from __future__ import annotations

import logging
from typing import Any

from ..models.sheet import Coord, MergeRect, Sheet

"""Sheet normalizer.

Expands a raw sheet (sparse cells + merge rectangles + used range) into a
rectangular grid so that column N of every row is reliably at index N:

1. every cell of a merge rectangle takes the rectangle's top-left value
   ("" when the top-left cell is absent)
2. string values are whitespace-trimmed, absent cells become ""
3. the grid is read row-major over the used range

Overlapping rectangles are applied in declaration order; each one overwrites
only its own cells, so the later rectangle wins where two overlap.

The input sheet is never mutated.
"""

__all__ = [
    "normalize",
    "Grid",
]

logger = logging.getLogger(__name__)

Grid = list[list[Any]]


def _clean(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def _apply_merges(values: dict[Coord, Any], merges: tuple[MergeRect, ...] | list[MergeRect]) -> None:
    """Write each rectangle's top-left value over the whole rectangle, in declaration order.

    A later rectangle reads its top-left after the earlier ones were written and
    overwrites only the cells it covers itself.
    """
    owner: dict[Coord, int] = {}
    reported: set[tuple[int, int]] = set()
    for i, merge in enumerate(merges):
        top_left = values.get(merge.anchor)
        fill = top_left if top_left is not None else ""
        for coord in merge.coords():
            prev = owner.get(coord)
            if prev is not None and (prev, i) not in reported:
                reported.add((prev, i))
                logger.warning(
                    "overlapping merge ranges %s and %s; later range takes precedence",
                    merges[prev],
                    merge,
                )
            owner[coord] = i
            values[coord] = fill


def normalize(sheet: Sheet) -> Grid:
    """Return the rectangular, hole-free grid for ``sheet``.

    len(grid) == used_range.rows and every row has used_range.cols entries.
    A sheet without a used range yields an empty grid.
    """
    values: dict[Coord, Any] = {coord: sheet.value_at(*coord) for coord in sheet.cells}
    if sheet.merges:
        _apply_merges(values, sheet.merges)

    used = sheet.used_range
    if used is None or used.is_empty:
        return []

    grid: Grid = [
        [_clean(values.get((r, c))) for c in range(used.min_col, used.max_col + 1)]
        for r in range(used.min_row, used.max_row + 1)
    ]
    logger.debug("normalized sheet '%s' to %dx%d grid", sheet.name, used.rows, used.cols)
    return grid
