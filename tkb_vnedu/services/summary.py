from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for a conversion run."""


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
    """Render the SUMMARY line.

    Format:
    SUMMARY mode={mode} classes={n} rows={n} subjects={n} unmapped={n}
    written={yes|no} elapsed_sec={sec}

    >>> from datetime import datetime, timezone
    >>> t = datetime(2024, 9, 5, 7, 0, 0, tzinfo=timezone.utc)
    >>> render_summary_line(ProcessingResult(
    ...     mode="single", classes=2, output_rows=10, subjects=5, unmapped=0,
    ...     start_time=t, end_time=t, elapsed_seconds=2.0, written=True))
    'SUMMARY mode=single classes=2 rows=10 subjects=5 unmapped=0 written=yes elapsed_sec=2'
    """
    return (
        f"SUMMARY mode={result.mode} "
        f"classes={result.classes} "
        f"rows={result.output_rows} "
        f"subjects={result.subjects} "
        f"unmapped={result.unmapped} "
        f"written={'yes' if result.written else 'no'} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
