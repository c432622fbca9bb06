from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .data_point import IotDataPoint
from .parse_error import ParseError

"""Dataset result models.

DatasetResult is what a single parse call returns. Dataset is the explicit,
caller-owned accumulation of several results (e.g. one per input file); append
returns a new value instead of mutating shared state.
"""

__all__ = [
    "DatasetResult",
    "Dataset",
    "SourceError",
]


@dataclass(frozen=True)
class DatasetResult:
    """Points and row errors of one parse, both in row order."""
    points: tuple[IotDataPoint, ...] = ()
    errors: tuple[ParseError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Output document; ``errors`` is present only when non-empty."""
        out: dict[str, Any] = {"points": [p.to_dict() for p in self.points]}
        if self.errors:
            out["errors"] = [e.to_dict() for e in self.errors]
        return out


@dataclass(frozen=True)
class SourceError:
    """Row error attributed to the source it came from."""
    source: str
    error: ParseError

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, **self.error.to_dict()}


@dataclass(frozen=True)
class Dataset:
    """Immutable accumulation of DatasetResults across sources."""
    points: tuple[IotDataPoint, ...] = ()
    errors: tuple[SourceError, ...] = ()
    sources: tuple[str, ...] = field(default=())

    def append(self, result: DatasetResult, source: str = "<memory>") -> Dataset:
        return Dataset(
            points=self.points + result.points,
            errors=self.errors + tuple(SourceError(source, e) for e in result.errors),
            sources=self.sources + (source,),
        )

    def __len__(self) -> int:
        return len(self.points)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"points": [p.to_dict() for p in self.points]}
        if self.errors:
            out["errors"] = [e.to_dict() for e in self.errors]
        return out
