from __future__ import annotations

import logging

from metalman_iot.excel.normalizer import normalize
from metalman_iot.models.sheet import CellRecord, MergeRect, Sheet, UsedRange


def _sheet(cells: dict, used: UsedRange | None, merges=()) -> Sheet:
    return Sheet(
        name="Data",
        cells={k: CellRecord(v) for k, v in cells.items()},
        used_range=used,
        merges=tuple(merges),
    )


def test_merge_value_fills_whole_rectangle_including_top_left():
    sheet = _sheet(
        {(0, 0): "h1", (0, 1): "h2", (0, 2): "h3", (2, 1): "X"},
        UsedRange(0, 0, 3, 2),
        [MergeRect(2, 1, 3, 2)],
    )
    grid = normalize(sheet)
    assert grid[2][1] == grid[2][2] == grid[3][1] == grid[3][2] == "X"
    assert grid[2][0] == "" and grid[3][0] == ""


def test_merge_anchor_value_is_trimmed_everywhere():
    sheet = _sheet({(0, 0): "  Plant A  "}, UsedRange(0, 0, 2, 0), [MergeRect(0, 0, 2, 0)])
    assert normalize(sheet) == [["Plant A"], ["Plant A"], ["Plant A"]]


def test_merge_with_absent_top_left_propagates_empty_string():
    sheet = _sheet({(1, 1): 5}, UsedRange(0, 0, 1, 1), [MergeRect(0, 0, 1, 0)])
    assert normalize(sheet) == [["", ""], ["", 5]]


def test_merge_keeps_non_string_values():
    sheet = _sheet({(0, 0): 45000.5}, UsedRange(0, 0, 0, 2), [MergeRect(0, 0, 0, 2)])
    assert normalize(sheet) == [[45000.5, 45000.5, 45000.5]]


def test_whitespace_is_trimmed_and_holes_filled():
    sheet = _sheet({(0, 0): "  Plant A  ", (1, 2): "\tSENSOR\n", (1, 0): True}, UsedRange(0, 0, 1, 2))
    assert normalize(sheet) == [["Plant A", "", ""], [True, "", "SENSOR"]]


def test_grid_is_rectangular_for_sparse_sheet():
    used = UsedRange(0, 0, 4, 6)
    sheet = _sheet({(0, 0): "a", (4, 6): "z", (2, 3): 1.5}, used)
    grid = normalize(sheet)
    assert len(grid) == used.rows == 5
    assert all(len(row) == used.cols == 7 for row in grid)
    assert all(cell is not None for row in grid for cell in row)


def test_used_range_offset_from_origin():
    sheet = _sheet({(1, 1): "b", (2, 2): "c", (0, 0): "outside"}, UsedRange(1, 1, 2, 2))
    assert normalize(sheet) == [["b", ""], ["", "c"]]


def test_no_used_range_gives_empty_grid():
    assert normalize(_sheet({}, None)) == []
    assert normalize(_sheet({}, None, [MergeRect(0, 0, 1, 1)])) == []


def test_normalization_is_idempotent():
    sheet = _sheet(
        {(0, 0): " Plant ", (0, 1): 45000, (2, 2): "  x"},
        UsedRange(0, 0, 3, 2),
        [MergeRect(0, 0, 2, 0)],
    )
    grid = normalize(sheet)
    assert normalize(Sheet.from_rows("again", grid)) == grid


def test_input_sheet_is_not_mutated():
    cells = {(0, 0): CellRecord("  a  ")}
    sheet = Sheet(name="s", cells=cells, used_range=UsedRange(0, 0, 1, 1), merges=(MergeRect(0, 0, 1, 0),))
    normalize(sheet)
    assert cells == {(0, 0): CellRecord("  a  ")}


def test_overlapping_merges_later_rectangle_wins(caplog):
    sheet = _sheet(
        {(0, 1): "A", (1, 0): "B"},
        UsedRange(0, 0, 1, 1),
        [MergeRect(0, 1, 1, 1), MergeRect(1, 0, 1, 1)],
    )
    with caplog.at_level(logging.WARNING, logger="metalman_iot"):
        grid = normalize(sheet)
    assert grid == [["", "A"], ["B", "B"]]
    assert any("overlapping merge" in r.getMessage() for r in caplog.records)


def test_merge_extending_past_used_range_is_clipped_to_grid():
    sheet = _sheet({(0, 0): "wide"}, UsedRange(0, 0, 0, 1), [MergeRect(0, 0, 0, 4)])
    assert normalize(sheet) == [["wide", "wide"]]


def test_later_merge_over_earlier_anchor_keeps_earlier_only_cells(caplog):
    sheet = _sheet(
        {(0, 0): "A", (1, 1): "X"},
        UsedRange(0, 0, 2, 2),
        [MergeRect(1, 1, 2, 2), MergeRect(0, 0, 1, 1)],
    )
    with caplog.at_level(logging.WARNING, logger="metalman_iot"):
        grid = normalize(sheet)
    assert grid == [
        ["A", "A", ""],
        ["A", "A", "X"],
        ["", "X", "X"],
    ]
    warnings = [r for r in caplog.records if "overlapping merge" in r.getMessage()]
    assert len(warnings) == 1


def test_later_merge_reads_anchor_written_by_earlier_merge():
    sheet = _sheet(
        {(0, 0): "first"},
        UsedRange(0, 0, 1, 2),
        [MergeRect(0, 0, 0, 1), MergeRect(0, 1, 1, 2)],
    )
    assert normalize(sheet) == [["first", "first", "first"], ["", "first", "first"]]


def test_many_disjoint_merges_log_no_overlap(caplog):
    merges = [MergeRect(r, 0, r, 1) for r in range(0, 2000)]
    cells = {(r, 0): f"p{r}" for r in range(0, 2000)}
    sheet = _sheet(cells, UsedRange(0, 0, 1999, 1), merges)
    with caplog.at_level(logging.WARNING, logger="metalman_iot"):
        grid = normalize(sheet)
    assert grid[1999] == ["p1999", "p1999"]
    assert not caplog.records
