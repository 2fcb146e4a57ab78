from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from typing import Any

"""Result models for the bulk import pipeline.

BatchResponse is the parsed body of one successful bulk request. RowError /
GlobalRowError carry per-row failures before and after translation into the
spreadsheet's row numbering. AggregateReport is the running (and finally the
complete) tally shown to the operator.
"""

# Row number used when the failing row cannot be determined
UNKNOWN_ROW = -1


@dataclass(frozen=True)
class BatchResponse:
    """Parsed ``{summary, errors}`` body returned for one batch.

    ``errors`` keeps the endpoint's raw entries (``{index, error?, errors?}``);
    message normalization happens in the aggregator.
    """
    created: int
    failed: int
    errors: tuple[dict[str, Any], ...] = ()
    total: int | None = None


@dataclass(frozen=True)
class RowError:
    """Endpoint error for one row, indexed within its batch."""
    local_index: int | None  # None when the endpoint sent no usable index
    message: str


@dataclass(frozen=True)
class GlobalRowError:
    """Row error translated into the spreadsheet's 1-based data row numbering."""
    row_number: int  # start_offset + local_index + 1, UNKNOWN_ROW if unknown
    message: str
    batch_number: int

    def describe(self) -> str:
        if self.row_number == UNKNOWN_ROW:
            return self.message
        return f"row {self.row_number}: {self.message}"


@dataclass(frozen=True)
class AggregateReport:
    """Success/failure totals and itemized errors of an import.

    ``success_count`` / ``failed_count`` come from the endpoint's summary
    counts and are independent of ``errors``; one is never derived from the
    other.
    """
    success_count: int = 0
    failed_count: int = 0
    errors: tuple[GlobalRowError, ...] = ()
    total_records: int = 0
    completed_batches: int = 0
    total_batches: int = 0

    @property
    def processed_count(self) -> int:
        return self.success_count + self.failed_count

    @property
    def has_failures(self) -> bool:
        return self.failed_count > 0 or bool(self.errors)

    def messages(self) -> list[str]:
        return [e.describe() for e in self.errors]


@dataclass
class BatchStatsAccumulator:
    """Collects per-batch submit times and summarizes them."""
    batch_times: list[float] = field(default_factory=list)

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Return (total_batches, avg_batch_seconds, p95_batch_seconds)."""
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            # 19th of 20 inclusive quantiles == 95th percentile
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method="inclusive"
            )[18]

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
