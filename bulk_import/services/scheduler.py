from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass

from ..api.client import TransportError
from ..models.config_models import DEFAULT_BATCH_SIZE, DEFAULT_PACING_DELAY_MS
from ..models.processing_result import BatchResponse
from ..models.row_data import MappedRecord

"""Sequential, paced batch submission.

Records are cut into contiguous batches and submitted one at a time. The
scheduler is an async generator: each outcome is handed to the consumer
before the pacing delay starts, and the next batch is only submitted after
that delay. Transport failures never stop the run.
"""

__all__ = [
    "Batch",
    "BatchOutcome",
    "BatchScheduler",
    "partition",
    "progress_percent",
]

logger = logging.getLogger(__name__)

Submit = Callable[[Sequence[MappedRecord]], Awaitable[BatchResponse]]
Sleep = Callable[[float], Awaitable[object]]


@dataclass(frozen=True)
class Batch:
    number: int  # 1-based
    start_offset: int  # index of the first record in the full sequence
    records: tuple[MappedRecord, ...]

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class BatchOutcome:
    """Result of submitting one batch: a response or a transport error message."""
    batch: Batch
    total_batches: int
    progress: int
    elapsed_seconds: float
    response: BatchResponse | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.response is not None


def partition(records: Sequence[MappedRecord], batch_size: int) -> list[Batch]:
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1 (got {batch_size})")
    return [
        Batch(number=i // batch_size + 1, start_offset=i, records=tuple(records[i:i + batch_size]))
        for i in range(0, len(records), batch_size)
    ]


def progress_percent(completed: int, total: int) -> int:
    """Completed share in percent, rounded half up."""
    if total <= 0:
        return 0
    return math.floor(completed / total * 100 + 0.5)


class BatchScheduler:
    def __init__(
        self,
        records: Sequence[MappedRecord],
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pacing_delay: float = DEFAULT_PACING_DELAY_MS / 1000,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if pacing_delay < 0:
            raise ValueError(f"pacing_delay must be >= 0 (got {pacing_delay})")
        self.batches = partition(records, batch_size)
        self.batch_size = batch_size
        self.pacing_delay = pacing_delay
        self._sleep = sleep

    @property
    def total_batches(self) -> int:
        return len(self.batches)

    async def run(self, submit: Submit) -> AsyncIterator[BatchOutcome]:
        total = self.total_batches
        for i, batch in enumerate(self.batches):
            started = time.perf_counter()
            response: BatchResponse | None = None
            error: str | None = None
            try:
                response = await submit(batch.records)
            except TransportError as e:
                error = str(e) or type(e).__name__
            except Exception as e:
                logger.exception("unexpected error submitting batch %d", batch.number)
                error = str(e) or type(e).__name__
            yield BatchOutcome(
                batch=batch,
                total_batches=total,
                progress=progress_percent(i + 1, total),
                elapsed_seconds=time.perf_counter() - started,
                response=response,
                error=error,
            )
            if i + 1 < total:
                await self._sleep(self.pacing_delay)
