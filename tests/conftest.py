# Shared pytest fixtures
from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from metalman_iot.logging.init import reset_logging

HEADER = ["Plant", "Date", "Hour", "Sensor", "Consumed kW"]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("METALMAN_IOT_CONFIG", raising=False)
    return tmp_path


@pytest.fixture()
def sample_config_yaml(temp_workdir: Path) -> str:
    return (
        "target_sheet: Master_Data\n"
        f"error_log_dir: {(temp_workdir / 'logs').as_posix()}\n"
    )


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "metalman.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_workbook() -> Callable[..., Path]:
    """Build an .xlsx file: ``sheets`` maps sheet name -> rows, ``merges`` -> A1 ranges."""

    def _make(
        path: Path,
        sheets: dict[str, list[list[Any]]],
        merges: dict[str, list[str]] | None = None,
    ) -> Path:
        wb = Workbook()
        wb.remove(wb.active)
        for name, rows in sheets.items():
            ws = wb.create_sheet(title=name)
            for row in rows:
                ws.append(row)
            for rng in (merges or {}).get(name, []):
                ws.merge_cells(rng)
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
        return path

    return _make


@pytest.fixture()
def readings_rows() -> list[list[Any]]:
    """Header + four readings; plant names of rows 2-3 come from a merge (A2:A3)."""
    return [
        HEADER,
        ["  Plant North ", 45000, "0-1", "SENSOR-01", 12.5],
        [None, 45000, "1-2", "SENSOR-01", 13],
        ["Plant South", 45001.5, "12-13", "SENSOR-02", "7.25"],
        ["Plant South", 45001.5, "13-14", "SENSOR-03", 0],
    ]


@pytest.fixture()
def corrupt_workbook(make_workbook) -> Callable[..., Path]:
    """Write a zip-valid .xlsx whose ``member`` part is replaced by ``payload``."""

    def _make(path: Path, member: str = "xl/workbook.xml", payload: bytes = b"<workbook><not-closed>") -> Path:
        good = make_workbook(path.with_name(f"_source_{path.name}"), {"Master Data": [["x"]]})
        with zipfile.ZipFile(good) as src, zipfile.ZipFile(path, "w") as dst:
            for item in src.infolist():
                data = payload if item.filename == member else src.read(item.filename)
                dst.writestr(item, data)
        good.unlink()
        return path

    return _make
