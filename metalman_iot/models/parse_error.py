from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Row-level parse error model.

A ParseError is data, not an exception: the row parser returns one per failing
row and the dataset builder collects them next to the successfully parsed points.
"""

__all__ = [
    "ParseErrorType",
    "ParseError",
]


class ParseErrorType(Enum):
    """Classification of a failing row.

    - INVALID_DATE: date cell is not a usable spreadsheet date serial
    - INVALID_CONSUMPTION: consumption cell does not coerce to a finite number
    - MISSING_DATA: the row is blank
    - INVALID_DATA: a required text field is missing or blank
    """
    INVALID_DATE = "InvalidDate"
    INVALID_CONSUMPTION = "InvalidConsumption"
    MISSING_DATA = "MissingData"
    INVALID_DATA = "InvalidData"


@dataclass(frozen=True)
class ParseError:
    row: int  # 1-based index within the data rows (header excluded)
    kind: ParseErrorType
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "kind": self.kind.value, "message": self.message}

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return f"row={self.row} kind={self.kind.value} {self.message}"
