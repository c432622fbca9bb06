from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering.

Format:
SUMMARY files={total}/{total} success={s} failed={f} points={p} row_errors={e} elapsed_sec={t}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a batch run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from metalman_iot.models.dataset import Dataset
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=2, failed_files=1, total_points=40, total_row_errors=3,
        ...     start_time=t, end_time=t, elapsed_seconds=2.0, dataset=Dataset(),
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=3/3 success=2 failed=1 points=40 row_errors=3 elapsed_sec=2'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"points={result.total_points} "
        f"row_errors={result.total_row_errors} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
