#!/usr/bin/env python3
"""Sample workbook generator for the IoT consumption parser.

Writes an .xlsx file in the layout the parser expects:
- Row 1: header (Plant | Date | Hour | Sensor | Consumed kW)
- Row 2+: one hourly reading per row, date stored as a spreadsheet serial

Each plant's name is written once and merged vertically over its block of rows,
as in the exports from the metering system. A share of rows can be corrupted on
purpose to exercise the row-error reporting.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd
from openpyxl import load_workbook

HEADER = ["Plant", "Date", "Hour", "Sensor", "Consumed kW"]
EXCEL_DATE_OFFSET = 25569


def generate_readings(
    rows: int, plants: int, sensors: int, bad_ratio: float = 0.0, seed: int = 42
) -> pd.DataFrame:
    """Generate synthetic hourly readings, grouped by plant.

    Args:
        rows: Number of data rows
        plants: Number of distinct plants (each gets a contiguous block)
        sensors: Number of sensors per plant
        bad_ratio: Fraction of rows to corrupt (blank row / text date / text kW)
        seed: Random seed for reproducible data
    """
    rng = np.random.default_rng(seed)

    plant_ids = np.sort(rng.integers(0, plants, rows))
    start_serial = pd.Timestamp("2024-01-01").value / 86_400_000_000_000 + EXCEL_DATE_OFFSET
    hours = np.arange(rows) % 24
    days = np.arange(rows) // 24

    frame = pd.DataFrame(
        {
            "plant": [f"Plant {chr(65 + int(p) % 26)}" for p in plant_ids],
            "date": start_serial + days + hours / 24.0,
            "hour": [f"{h}-{h + 1}" for h in hours],
            "sensor": [f"SENSOR-{int(s):02d}" for s in rng.integers(1, sensors + 1, rows)],
            "kw": np.round(rng.gamma(shape=2.0, scale=35.0, size=rows), 3),
        }
    )

    if bad_ratio > 0:
        bad = rng.random(rows) < bad_ratio
        kinds = rng.integers(0, 3, rows)
        frame = frame.astype({"date": object, "kw": object})
        for i in np.flatnonzero(bad):
            if kinds[i] == 0:
                frame.loc[i, ["date", "hour", "sensor", "kw"]] = [None, None, None, None]
            elif kinds[i] == 1:
                frame.loc[i, "date"] = "n/a"
            else:
                frame.loc[i, "kw"] = "err"
    return frame


def _merge_plant_blocks(path: Path, sheet_name: str, plants: list[str]) -> int:
    """Blank repeated plant names and merge each block. Returns the merge count."""
    wb = load_workbook(path)
    ws = wb[sheet_name]
    merges = 0
    start = 0
    for i in range(1, len(plants) + 1):
        if i == len(plants) or plants[i] != plants[start]:
            if i - start > 1:
                first, last = start + 2, i + 1  # +1 header, +1 1-based
                for r in range(first + 1, last + 1):
                    ws.cell(row=r, column=1).value = None
                ws.merge_cells(start_row=first, start_column=1, end_row=last, end_column=1)
                merges += 1
            start = i
    wb.save(path)
    return merges


def create_workbook(
    output_path: Path,
    rows: int,
    plants: int,
    sensors: int,
    sheet_name: str = "Master Data",
    bad_ratio: float = 0.0,
    seed: int = 42,
) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame = generate_readings(rows, plants, sensors, bad_ratio, seed)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        out = frame.copy()
        out.columns = HEADER
        out.to_excel(writer, sheet_name=sheet_name, index=False)
        pd.DataFrame([["generated by gen_sample_workbook.py"]]).to_excel(
            writer, sheet_name="Notes", header=False, index=False
        )

    merges = _merge_plant_blocks(output_path, sheet_name, frame["plant"].tolist())
    print(f"Created workbook: {output_path}")
    print(f"  Sheet: {sheet_name}")
    print(f"  Rows: {rows} (+ 1 header row), merged plant blocks: {merges}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a synthetic IoT consumption workbook")
    parser.add_argument("--out", type=Path, default=Path("data/sample.xlsx"), help="Output .xlsx path")
    parser.add_argument("--rows", type=int, default=500, help="Number of data rows (default: 500)")
    parser.add_argument("--plants", type=int, default=3, help="Number of plants (default: 3)")
    parser.add_argument("--sensors", type=int, default=4, help="Sensors per plant (default: 4)")
    parser.add_argument("--sheet", default="Master Data", help="Data sheet name")
    parser.add_argument("--bad-ratio", type=float, default=0.0, help="Share of corrupted rows (0-1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0 or args.plants <= 0 or args.sensors <= 0:
        print("Error: --rows, --plants and --sensors must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.bad_ratio <= 1.0:
        print("Error: --bad-ratio must be within [0, 1]", file=sys.stderr)
        return 1

    create_workbook(args.out, args.rows, args.plants, args.sensors, args.sheet, args.bad_ratio, args.seed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
