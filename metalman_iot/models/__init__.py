"""Domain models for the IoT workbook parser.

Decoded workbook structures, typed data points, row errors and the result
aggregates returned by the parsing pipeline.
"""

from .data_point import IotDataPoint
from .dataset import Dataset, DatasetResult, SourceError
from .parse_error import ParseError, ParseErrorType
from .processing_result import FileStat, ProcessingResult
from .sheet import CellRecord, MergeRect, Sheet, UsedRange, WorkBook

__all__ = [
    # Decoded workbook
    "CellRecord",
    "MergeRect",
    "Sheet",
    "UsedRange",
    "WorkBook",
    # Parse output
    "IotDataPoint",
    "ParseError",
    "ParseErrorType",
    "DatasetResult",
    "Dataset",
    "SourceError",
    # Batch results
    "FileStat",
    "ProcessingResult",
]
