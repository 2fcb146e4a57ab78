from __future__ import annotations

from ..models.processing_result import AggregateReport

"""SUMMARY line and error listing rendering for one upload."""


def _format_seconds(value: float) -> str:
    # integers without ".0", tiny values without scientific notation
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(entity: str, report: AggregateReport, elapsed_seconds: float) -> str:
    """Render the SUMMARY line of an upload.

    Format:
    SUMMARY entity={entity} records={n} batches={done}/{total} success={s}
    failed={f} errors={k} elapsed_sec={t}

    Examples:
        >>> report = AggregateReport(success_count=118, failed_count=2, total_records=120,
        ...                          completed_batches=3, total_batches=3)
        >>> render_summary_line("doctors", report, 1.5)
        'SUMMARY entity=doctors records=120 batches=3/3 success=118 failed=2 errors=0 elapsed_sec=1.5'
    """
    return (
        f"SUMMARY entity={entity} "
        f"records={report.total_records} "
        f"batches={report.completed_batches}/{report.total_batches} "
        f"success={report.success_count} "
        f"failed={report.failed_count} "
        f"errors={len(report.errors)} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )


def render_error_lines(report: AggregateReport) -> list[str]:
    return [f"ERROR {message}" for message in report.messages()]
