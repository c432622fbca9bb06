from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..models.parse_error import ParseError

"""Row-error log (JSON Lines).

Every rejected row, and every file that could not be parsed at all, becomes one
ErrorLogRecord. Records are buffered and written to
``<log_dir>/errors-YYYYMMDD-HHMMSS.log`` (UTC) on flush. File-level failures use
row=-1.
"""

__all__ = [
    "ErrorLogRecord",
    "ErrorLogBuffer",
    "FILE_LEVEL_ROW",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
FILE_LEVEL_ROW = -1


@dataclass(frozen=True)
class ErrorLogRecord:
    timestamp: str  # ISO8601 UTC with 'Z'
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorLogRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorLogRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_parse_error(file: str, sheet: str, error: ParseError) -> ErrorLogRecord:
        return ErrorLogRecord.create(file, sheet, error.row, error.kind.value, error.message)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


class ErrorLogBuffer:
    """In-memory buffer of error records; flush() appends them as JSON Lines.

    The file path is fixed on first access. Not thread-safe (serial use only).
    """

    def __init__(self, log_dir: Path | str = "./logs") -> None:
        self.log_dir = Path(log_dir)
        self._records: list[ErrorLogRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.log_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ErrorLogRecord]:
        return list(self._records)

    def append(self, record: ErrorLogRecord) -> None:
        self._records.append(record)

    def extend_parse_errors(self, file: str, sheet: str, errors: tuple[ParseError, ...]) -> None:
        for err in errors:
            self.append(ErrorLogRecord.from_parse_error(file, sheet, err))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records. Returns the log path, or None if nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
