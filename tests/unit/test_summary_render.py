from __future__ import annotations

from bulk_import.models.processing_result import UNKNOWN_ROW, AggregateReport, GlobalRowError
from bulk_import.services.summary import render_error_lines, render_summary_line


def _report(**overrides) -> AggregateReport:
    values = dict(success_count=118, failed_count=2, total_records=120, completed_batches=3, total_batches=3)
    values.update(overrides)
    return AggregateReport(**values)


def test_render_summary_line_basic():
    line = render_summary_line("doctors", _report(), 1.5)
    assert line == (
        "SUMMARY entity=doctors records=120 batches=3/3 success=118 "
        "failed=2 errors=0 elapsed_sec=1.5"
    )


def test_elapsed_formatting():
    assert render_summary_line("doctors", _report(), 0).endswith("elapsed_sec=0")
    assert render_summary_line("doctors", _report(), 2.0).endswith("elapsed_sec=2")
    assert render_summary_line("doctors", _report(), 0.0012).endswith("elapsed_sec=0.0012")
    assert render_summary_line("doctors", _report(), 12.34567).endswith("elapsed_sec=12.346")


def test_error_count_and_lines():
    errors = (
        GlobalRowError(7, "email duplicado", 1),
        GlobalRowError(UNKNOWN_ROW, "batch 2 failed: timeout", 2),
    )
    report = _report(errors=errors)
    assert "errors=2" in render_summary_line("specialties", report, 1)
    assert render_error_lines(report) == [
        "ERROR row 7: email duplicado",
        "ERROR batch 2 failed: timeout",
    ]
