from __future__ import annotations

import re
from datetime import UTC, datetime

import pytest

from tkb_vnedu.models.processing_result import ProcessingResult
from tkb_vnedu.services.summary import render_summary_line

SUMMARY_RE = re.compile(
    r"^SUMMARY mode=(single|separate) classes=\d+ rows=\d+ subjects=\d+ unmapped=\d+ "
    r"written=(yes|no) elapsed_sec=[0-9.]+$"
)


def _result(**overrides) -> ProcessingResult:
    t = datetime(2024, 9, 5, 7, 0, 0, tzinfo=UTC)
    values = dict(
        mode="separate",
        classes=3,
        output_rows=12,
        subjects=9,
        unmapped=1,
        start_time=t,
        end_time=t,
        elapsed_seconds=1.25,
        written=False,
    )
    values.update(overrides)
    return ProcessingResult(**values)


def test_render_summary_line():
    assert render_summary_line(_result()) == (
        "SUMMARY mode=separate classes=3 rows=12 subjects=9 unmapped=1 written=no elapsed_sec=1.25"
    )


@pytest.mark.parametrize(
    "elapsed, text",
    [(0, "0"), (2.0, "2"), (0.5, "0.5"), (1.23456, "1.235"), (0.0012, "0.0012")],
)
def test_elapsed_formatting(elapsed, text):
    line = render_summary_line(_result(elapsed_seconds=elapsed, written=True))
    assert line.endswith(f"written=yes elapsed_sec={text}")
    assert SUMMARY_RE.match(line)
