from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

"""IotDataPoint model.

One validated energy-consumption reading extracted from a single worksheet row.
Instances are created by the row parser only and never mutated afterwards.
"""

__all__ = [
    "IotDataPoint",
]


@dataclass(frozen=True)
class IotDataPoint:
    """Typed reading for one (plant, date, hour range, sensor) row.

    Attributes:
        plant: Plant name (trimmed, non-empty)
        date: UTC datetime converted from the spreadsheet date serial
        hour_range: Hour bucket label such as "0-1" (trimmed, non-empty)
        sensor_name: Sensor identifier (trimmed, non-empty)
        consumed_kw: Finite consumption value in kW
    """
    plant: str
    date: datetime
    hour_range: str
    sensor_name: str
    consumed_kw: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "plant": self.plant,
            "date": self.date.isoformat().replace("+00:00", "Z"),
            "hourRange": self.hour_range,
            "sensorName": self.sensor_name,
            "consumedKW": self.consumed_kw,
        }
