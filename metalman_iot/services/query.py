from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import pandas as pd

from ..models.data_point import IotDataPoint

"""Read-only query layer over parsed data points.

All functions take an immutable sequence of IotDataPoint (e.g. DatasetResult.points
or Dataset.points) and never modify it. Row order is the order of the sequence.
"""

__all__ = [
    "FRAME_COLUMNS",
    "to_frame",
    "unique_sensor_names",
    "latest_for_sensor",
    "total_consumption",
    "total_for_plant",
    "total_for_sensor",
    "total_for_sensor_in_range",
    "consumption_by",
]

FRAME_COLUMNS = ["plant", "date", "hour_range", "sensor_name", "consumed_kw"]
_GROUP_KEYS = {"plant", "sensor_name", "hour_range"}


def to_frame(points: Sequence[IotDataPoint]) -> pd.DataFrame:
    """DataFrame with one row per point.

    ``date`` is kept as Python datetimes (object dtype) so serials outside the
    nanosecond Timestamp range still round-trip.
    """
    frame = pd.DataFrame(
        {
            "plant": pd.Series([p.plant for p in points], dtype=object),
            "date": pd.Series([p.date for p in points], dtype=object),
            "hour_range": pd.Series([p.hour_range for p in points], dtype=object),
            "sensor_name": pd.Series([p.sensor_name for p in points], dtype=object),
            "consumed_kw": pd.Series([p.consumed_kw for p in points], dtype="float64"),
        },
        columns=FRAME_COLUMNS,
    )
    return frame


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def unique_sensor_names(points: Sequence[IotDataPoint]) -> list[str]:
    """Sensor names in first-seen order."""
    if not points:
        return []
    return to_frame(points)["sensor_name"].unique().tolist()


def latest_for_sensor(points: Sequence[IotDataPoint], sensor_name: str) -> dict[str, Any] | None:
    """Last reading (in row order) for ``sensor_name``, or None when absent."""
    frame = to_frame(points)
    matches = frame[frame["sensor_name"] == sensor_name]
    if matches.empty:
        return None
    last = matches.iloc[-1]
    return {
        "value": float(last["consumed_kw"]),
        "date": last["date"],
        "hour_range": last["hour_range"],
    }


def total_consumption(
    points: Sequence[IotDataPoint],
    *,
    plant: str | None = None,
    sensor_name: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> float:
    """Sum of consumed kW over the points matching every given filter.

    Date bounds are inclusive; naive bounds are taken as UTC.
    """
    frame = to_frame(points)
    if frame.empty:
        return 0.0
    mask = pd.Series(True, index=frame.index)
    if plant:
        mask &= frame["plant"] == plant
    if sensor_name:
        mask &= frame["sensor_name"] == sensor_name
    if start is not None:
        lo = _as_utc(start)
        mask &= frame["date"].map(lambda d: d >= lo).astype(bool)
    if end is not None:
        hi = _as_utc(end)
        mask &= frame["date"].map(lambda d: d <= hi).astype(bool)
    return float(frame.loc[mask, "consumed_kw"].sum())


def total_for_plant(points: Sequence[IotDataPoint], plant: str) -> float:
    return total_consumption(points, plant=plant)


def total_for_sensor(points: Sequence[IotDataPoint], sensor_name: str) -> float:
    return total_consumption(points, sensor_name=sensor_name)


def total_for_sensor_in_range(
    points: Sequence[IotDataPoint], sensor_name: str, start: datetime, end: datetime
) -> float:
    return total_consumption(points, sensor_name=sensor_name, start=start, end=end)


def consumption_by(points: Sequence[IotDataPoint], key: str = "plant") -> dict[str, float]:
    """Total consumed kW per ``key`` (plant, sensor_name or hour_range), first-seen order."""
    if key not in _GROUP_KEYS:
        raise ValueError(f"unsupported group key: {key!r} (expected one of {sorted(_GROUP_KEYS)})")
    frame = to_frame(points)
    if frame.empty:
        return {}
    totals = frame.groupby(key, sort=False)["consumed_kw"].sum()
    return {str(k): float(v) for k, v in totals.items()}
