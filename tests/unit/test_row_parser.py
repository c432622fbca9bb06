from __future__ import annotations

import math
from datetime import UTC, datetime

import pytest

from metalman_iot.models.data_point import IotDataPoint
from metalman_iot.models.parse_error import ParseError, ParseErrorType
from metalman_iot.parser.row_parser import coerce_number, is_blank_row, parse_dataset, parse_row

HEADER = ["Plant", "Date", "Hour", "Sensor", "kW"]


def test_partial_failure_isolation():
    grid = [
        HEADER,
        ["Plant1", 45000, "0-1", "SensorA", 10],
        ["", "", "", "", ""],
        ["Plant2", "not-a-date", "1-2", "SensorB", 5],
    ]
    result = parse_dataset(grid)

    assert len(result.points) == 1
    point = result.points[0]
    assert (point.plant, point.sensor_name, point.consumed_kw) == ("Plant1", "SensorA", 10.0)
    assert point.date == datetime(2023, 3, 15, tzinfo=UTC)

    assert [(e.row, e.kind) for e in result.errors] == [
        (2, ParseErrorType.MISSING_DATA),
        (3, ParseErrorType.INVALID_DATE),
    ]
    assert result.errors[0].message == "Row has insufficient data"
    assert "not-a-date" in result.errors[1].message


def test_non_numeric_consumption():
    result = parse_dataset([HEADER, ["Plant1", 45000, "0-1", "SensorA", "abc"]])
    assert result.points == ()
    assert len(result.errors) == 1
    err = result.errors[0]
    assert err.kind is ParseErrorType.INVALID_CONSUMPTION
    assert err.row == 1
    assert "abc" in err.message


def test_header_only_and_empty_grid():
    assert parse_dataset([HEADER]).points == ()
    assert parse_dataset([HEADER]).errors == ()
    assert parse_dataset([]).points == ()


def test_fields_are_trimmed():
    point = parse_row(["  Plant1 ", 45000.5, " 12-13 ", "\tSensorA ", " 3.5 "], 1)
    assert isinstance(point, IotDataPoint)
    assert point.plant == "Plant1"
    assert point.hour_range == "12-13"
    assert point.sensor_name == "SensorA"
    assert point.consumed_kw == 3.5
    assert point.date == datetime(2023, 3, 15, 12, tzinfo=UTC)


def test_extra_columns_are_ignored():
    point = parse_row(["Plant1", 45000, "0-1", "SensorA", 1, "note", 99], 1)
    assert isinstance(point, IotDataPoint)
    assert point.consumed_kw == 1.0


def test_short_row_missing_consumption_column():
    err = parse_row(["Plant1", 45000, "0-1", "SensorA"], 4)
    assert isinstance(err, ParseError)
    assert err.kind is ParseErrorType.INVALID_CONSUMPTION
    assert err.row == 4


@pytest.mark.parametrize(
    "row",
    [
        [],
        [None, None, None, None, None],
        ["   ", "\t", "", None, " "],
    ],
)
def test_blank_rows_are_missing_data(row):
    err = parse_row(row, 7)
    assert isinstance(err, ParseError)
    assert err.kind is ParseErrorType.MISSING_DATA
    assert err.row == 7


def test_zero_is_not_blank():
    assert not is_blank_row(["", "", "", "", 0])


def test_date_check_runs_before_plant_check():
    err = parse_row(["", "bad", "0-1", "SensorA", 1], 1)
    assert err.kind is ParseErrorType.INVALID_DATE


@pytest.mark.parametrize("date_value", ["45000", True, None, math.inf, 1e12])
def test_invalid_date_values(date_value):
    err = parse_row(["Plant1", date_value, "0-1", "SensorA", 1], 1)
    assert isinstance(err, ParseError)
    assert err.kind is ParseErrorType.INVALID_DATE


@pytest.mark.parametrize(
    "row, message",
    [
        (["", 45000, "0-1", "SensorA", 1], "Invalid plant name"),
        ([123, 45000, "0-1", "SensorA", 1], "Invalid plant name"),
        (["Plant1", 45000, "  ", "SensorA", 1], "Invalid hour range"),
        (["Plant1", 45000, "0-1", "", 1], "Invalid sensor name"),
        (["", 45000, "", "", "abc"], "Invalid plant name"),
    ],
)
def test_text_field_validation_order(row, message):
    err = parse_row(row, 1)
    assert isinstance(err, ParseError)
    assert err.kind is ParseErrorType.INVALID_DATA
    assert err.message == message


@pytest.mark.parametrize("value", ["abc", "1e999", math.nan, math.inf, None, "12kW", "1_000"])
def test_invalid_consumption_values(value):
    err = parse_row(["Plant1", 45000, "0-1", "SensorA", value], 1)
    assert isinstance(err, ParseError)
    assert err.kind is ParseErrorType.INVALID_CONSUMPTION


def test_each_failing_row_yields_exactly_one_error():
    grid = [HEADER] + [["", "x", "", "", "y"]] * 3 + [["P", 45000, "0-1", "S", 2]]
    result = parse_dataset(grid)
    assert [e.row for e in result.errors] == [1, 2, 3]
    assert len(result.points) == 1


@pytest.mark.parametrize(
    "value, expected",
    [
        (10, 10.0),
        (2.5, 2.5),
        ("  7.25 ", 7.25),
        ("-3", -3.0),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("", 0.0),
        ("   ", 0.0),
        (True, 1.0),
        (False, 0.0),
    ],
)
def test_coerce_number(value, expected):
    assert coerce_number(value) == expected


@pytest.mark.parametrize("value", [None, "abc", "1,5", "0x1A", object()])
def test_coerce_number_nan(value):
    assert math.isnan(coerce_number(value))
