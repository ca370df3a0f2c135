from __future__ import annotations

import re
from datetime import datetime, timezone

from pricelist_importer.models.processing_result import ProcessingResult
from pricelist_importer.services.summary import render_summary_line

"""SUMMARY line format contract."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"rows=([0-9]+)\s+submitted=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)\s+"
    r"throughput_rps=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY files=1/1 success=1 failed=0 rows=4 submitted=4 "
        "elapsed_sec=0.84 throughput_rps=4.762"
    )
    assert SUMMARY_PATTERN.match(line), "SUMMARY line should match contract regex"


def test_rendered_line_matches_pattern():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    result = ProcessingResult(
        success_files=3, failed_files=2, total_rows=1234, submitted_rows=800,
        start_time=now, end_time=now, elapsed_seconds=0.0042,
        throughput_rows_per_sec=293809.5238,
    )
    m = SUMMARY_PATTERN.match(render_summary_line(5, result))
    assert m
    assert m.group(3) == "3"
    assert m.group(4) == "2"
    assert m.group(6) == "800"
