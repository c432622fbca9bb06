from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..config.loader import AppConfig
from ..excel.normalizer import Grid, normalize
from ..excel.reader import WorkbookReadError, load_workbook
from ..excel.sheet_select import WorksheetNotFoundError, match_sheet_name, select_sheet
from ..logging.error_log import FILE_LEVEL_ROW, ErrorLogBuffer, ErrorLogRecord
from ..models.dataset import Dataset, DatasetResult
from ..models.processing_result import FileStat, ProcessingResult
from ..models.sheet import WorkBook
from ..parser.row_parser import parse_dataset
from .progress import ProgressTracker

"""Parsing pipeline.

workbook -> target sheet -> normalized grid -> DatasetResult, plus a batch
driver over several files that accumulates a Dataset and records failures.

Row errors never fail a file. A file fails only when it cannot be decoded or
the target worksheet is missing; those are raised by the single-file helpers
and turned into failed FileStats by process_files().
"""

__all__ = [
    "ProcessingError",
    "parse_workbook",
    "parse_file",
    "inspect_workbook",
    "process_files",
    "describe",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal batch error (nothing to process)."""


def parse_workbook(workbook: WorkBook, sheet_name: str) -> DatasetResult:
    """Select ``sheet_name`` (fuzzy match), normalize it and parse its rows.

    Raises:
        WorksheetNotFoundError: no sheet matches ``sheet_name``
    """
    sheet = select_sheet(workbook, sheet_name)
    grid = normalize(sheet)
    return parse_dataset(grid)


def parse_file(path: Path, sheet_name: str, error_log: ErrorLogBuffer | None = None) -> DatasetResult:
    """Read ``path`` and parse its target sheet.

    Row errors are also appended to ``error_log`` when one is given.

    Raises:
        WorkbookReadError: the file cannot be decoded
        WorksheetNotFoundError: no sheet matches ``sheet_name``
    """
    workbook = load_workbook(path)
    result = parse_workbook(workbook, sheet_name)
    if error_log is not None and result.errors:
        selected = match_sheet_name(sheet_name, workbook.sheet_names) or sheet_name
        error_log.extend_parse_errors(path.name, selected, result.errors)
    return result


def inspect_workbook(workbook: WorkBook) -> dict[str, Grid]:
    """Normalized grid of every sheet, keyed by sheet name in workbook order."""
    return {name: normalize(workbook.sheet(name)) for name in workbook.sheet_names}


def process_files(
    paths: list[Path],
    config: AppConfig,
    *,
    sheet_name: str | None = None,
    error_log: ErrorLogBuffer | None = None,
    progress_enabled: bool | None = None,
) -> ProcessingResult:
    """Parse every file in ``paths`` and aggregate the outcome.

    Raises:
        ProcessingError: ``paths`` is empty
    """
    if not paths:
        raise ProcessingError("no input files given")

    target = sheet_name or config.target_sheet
    if error_log is None:
        error_log = ErrorLogBuffer(config.error_log_dir)

    start_time = datetime.now(UTC)
    dataset = Dataset()
    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0

    with ProgressTracker(len(paths), enabled=progress_enabled) as progress:
        for path in paths:
            progress.start_file(path)
            file_start = datetime.now(UTC)
            try:
                result = parse_file(path, target, error_log)
            except (WorkbookReadError, WorksheetNotFoundError) as e:
                failed_count += 1
                logger.error("%s: %s", path.name, e)
                error_log.append(
                    ErrorLogRecord.create(
                        file=path.name,
                        sheet=target,
                        row=FILE_LEVEL_ROW,
                        error_type=type(e).__name__,
                        message=str(e),
                    )
                )
                file_stats.append(
                    FileStat(
                        file_name=path.name,
                        status="failed",
                        points=0,
                        row_errors=0,
                        elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                        error=str(e),
                    )
                )
                progress.finish_file(success=success_count, failed=failed_count)
                continue

            success_count += 1
            dataset = dataset.append(result, source=path.name)
            for err in result.errors:
                logger.warning("%s row=%d kind=%s %s", path.name, err.row, err.kind.value, err.message)
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status="success",
                    points=len(result.points),
                    row_errors=len(result.errors),
                    elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                )
            )
            progress.finish_file(success=success_count, failed=failed_count, points=len(dataset))

    log_path = error_log.flush()
    if log_path is not None:
        logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_points=len(dataset.points),
        total_row_errors=len(dataset.errors),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        dataset=dataset,
        file_stats=file_stats,
    )


def describe(result: ProcessingResult) -> dict[str, Any]:
    """Per-file outcome as plain data (used by --json output)."""
    return {
        "files": [
            {
                "file": s.file_name,
                "status": s.status,
                "points": s.points,
                "row_errors": s.row_errors,
                **({"error": s.error} if s.error else {}),
            }
            for s in result.file_stats or []
        ],
    }
