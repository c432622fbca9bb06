from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .dataset import Dataset

"""Processing result models for batch runs over several workbook files.

ProcessingResult aggregates per-file outcomes and the combined Dataset; it is the
input to the SUMMARY line renderer.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: str  # success / failed
    points: int
    row_errors: int
    elapsed_seconds: float
    error: str | None = None  # file-level failure reason


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one batch run."""
    success_files: int
    failed_files: int
    total_points: int
    total_row_errors: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    dataset: Dataset
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
