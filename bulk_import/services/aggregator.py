from __future__ import annotations

import json
import logging
from typing import Any

from ..models.processing_result import (
    UNKNOWN_ROW,
    AggregateReport,
    BatchResponse,
    GlobalRowError,
    RowError,
)
from .scheduler import BatchOutcome

"""Result aggregation across batches.

Counts come from the endpoint's summary; itemized errors come from its error
list. The two are accumulated side by side and never reconciled.
"""

__all__ = [
    "normalize_error_message",
    "to_row_error",
    "ResultAggregator",
]

logger = logging.getLogger(__name__)


def normalize_error_message(entry: Any) -> str:
    """Render one endpoint error entry as text.

    Order: truthy ``error`` field, then ``errors`` joined with ", " when it
    is a list, then JSON of ``errors`` (if truthy) or of the whole entry.
    """
    if not isinstance(entry, dict):
        return json.dumps(entry, ensure_ascii=False, default=str)
    if entry.get("error"):
        return str(entry["error"])
    errors = entry.get("errors")
    if isinstance(errors, list):
        return ", ".join(str(e) for e in errors)
    return json.dumps(errors or entry, ensure_ascii=False, default=str)


def to_row_error(entry: Any) -> RowError:
    index = entry.get("index") if isinstance(entry, dict) else None
    if isinstance(index, bool) or not isinstance(index, int):
        index = None
    return RowError(local_index=index, message=normalize_error_message(entry))


class ResultAggregator:
    """Running totals for one upload, fed once per completed batch."""

    def __init__(self, total_records: int, total_batches: int) -> None:
        self.total_records = total_records
        self.total_batches = total_batches
        self.success_count = 0
        self.failed_count = 0
        self.completed_batches = 0
        self._errors: list[GlobalRowError] = []

    @property
    def errors(self) -> tuple[GlobalRowError, ...]:
        return tuple(self._errors)

    def add_response(
        self,
        response: BatchResponse,
        start_offset: int,
        batch_number: int = 0,
        batch_size: int | None = None,
    ) -> list[GlobalRowError]:
        if batch_size is not None and response.created + response.failed > batch_size:
            logger.warning(
                "batch %d: endpoint reported %d created + %d failed for %d records",
                batch_number, response.created, response.failed, batch_size,
            )
        self.success_count += response.created
        self.failed_count += response.failed

        added: list[GlobalRowError] = []
        for entry in response.errors:
            row_error = to_row_error(entry)
            row_number = (
                UNKNOWN_ROW if row_error.local_index is None
                else start_offset + row_error.local_index + 1
            )
            added.append(GlobalRowError(row_number, row_error.message, batch_number))
        self._errors.extend(added)
        self.completed_batches += 1
        return added

    def add_transport_failure(self, batch_number: int, batch_size: int, message: str) -> GlobalRowError:
        self.failed_count += batch_size
        error = GlobalRowError(UNKNOWN_ROW, f"batch {batch_number} failed: {message}", batch_number)
        self._errors.append(error)
        self.completed_batches += 1
        return error

    def add_outcome(self, outcome: BatchOutcome) -> list[GlobalRowError]:
        batch = outcome.batch
        if outcome.response is not None:
            return self.add_response(outcome.response, batch.start_offset, batch.number, len(batch))
        return [self.add_transport_failure(batch.number, len(batch), outcome.error or "unknown error")]

    def snapshot(self) -> AggregateReport:
        return AggregateReport(
            success_count=self.success_count,
            failed_count=self.failed_count,
            errors=tuple(self._errors),
            total_records=self.total_records,
            completed_batches=self.completed_batches,
            total_batches=self.total_batches,
        )
