from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..excel.reader import ingest_file, read_path
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import UploadConfig
from ..models.error_record import BATCH_TRANSPORT_ERROR, ROW_VALIDATION_ERROR, ErrorRecord
from ..models.import_session import ImportSession
from ..models.processing_result import AggregateReport, BatchResponse, BatchStatsAccumulator
from ..models.row_data import MappedRecord
from .aggregator import ResultAggregator
from .progress import ProgressTracker
from .scheduler import BatchScheduler
from .session import begin_upload, complete_upload, guard_file_selection, load_rows, record_batch

"""Upload orchestration.

Ties the pieces together for one import:

1. ``select_file`` / ``select_path``: parameter check, decode off the event
   loop, load rows
2. ``run_upload``: lock the session, drive the scheduler, fold each outcome
   into the aggregator and the session, then complete

All mutable upload state is owned here and only changed in the per-batch
completion step.
"""

__all__ = [
    "UploadResult",
    "select_file",
    "select_path",
    "run_upload",
]

logger = logging.getLogger(__name__)

Submit = Callable[[Sequence[MappedRecord]], Awaitable[BatchResponse]]
ProgressCallback = Callable[[ImportSession], None]
SuccessCallback = Callable[[AggregateReport], None]


@dataclass(frozen=True)
class UploadResult:
    session: ImportSession
    report: AggregateReport
    elapsed_seconds: float
    error_log_path: Path | None = None


async def select_file(session: ImportSession, file_name: str, data: bytes) -> ImportSession:
    """Decode ``data`` and load it into the session.

    Raises ConfigurationError / SessionStateError before decoding, and
    ParseError if the file cannot be decoded. On any error the given
    session is left as it was.
    """
    guard_file_selection(session)
    rows = await ingest_file(data)
    logger.info("parsed %s: %d rows", file_name, len(rows))
    return load_rows(session, file_name, rows)


async def select_path(session: ImportSession, path: Path) -> ImportSession:
    """Same as select_file for a file on disk; an unreadable path is a ParseError."""
    guard_file_selection(session)
    rows = await read_path(path)
    logger.info("parsed %s: %d rows", path.name, len(rows))
    return load_rows(session, path.name, rows)


async def run_upload(
    session: ImportSession,
    submit: Submit,
    *,
    upload: UploadConfig | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    on_progress: ProgressCallback | None = None,
    on_success: SuccessCallback | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> UploadResult:
    """Submit every record of a PARSED session and return the COMPLETED session.

    Raises NoDataError / ConfigurationError / SessionStateError before any
    batch is submitted. Batch failures are recorded, never raised.
    """
    upload = upload or UploadConfig()
    session = begin_upload(session)
    records = session.records
    scheduler = BatchScheduler(
        records,
        batch_size=upload.batch_size,
        pacing_delay=upload.pacing_delay,
        sleep=sleep,
    )
    aggregator = ResultAggregator(len(records), scheduler.total_batches)
    stats = BatchStatsAccumulator()
    started = time.perf_counter()

    logger.info(
        "uploading %d %s in %d batches of up to %d",
        len(records), session.profile.entity, scheduler.total_batches, upload.batch_size,
    )
    with ProgressTracker(scheduler.total_batches, description=f"Uploading {session.profile.entity}") as progress:
        async for outcome in scheduler.run(submit):
            added = aggregator.add_outcome(outcome)
            stats.add_batch_time(outcome.elapsed_seconds)
            if outcome.ok:
                logger.debug(
                    "batch %d/%d ok: created=%d failed=%d",
                    outcome.batch.number, outcome.total_batches,
                    outcome.response.created, outcome.response.failed,
                )
            else:
                logger.warning("batch %d/%d failed: %s", outcome.batch.number, outcome.total_batches, outcome.error)
            if error_log is not None:
                error_type = ROW_VALIDATION_ERROR if outcome.ok else BATCH_TRANSPORT_ERROR
                for e in added:
                    error_log.append(ErrorRecord.create(
                        file=session.file_name or "",
                        entity=session.profile.entity,
                        row=e.row_number,
                        error_type=error_type,
                        message=e.message,
                    ))
            session = record_batch(session, aggregator.snapshot(), outcome.progress)
            progress.finish_batch(success=aggregator.success_count, failed=aggregator.failed_count)
            if on_progress is not None:
                on_progress(session)

    session = complete_upload(session)
    elapsed = time.perf_counter() - started
    report = aggregator.snapshot()

    total_batches, avg_batch, p95_batch = stats.get_stats()
    logger.debug("batch timing: batches=%d avg_sec=%.3f p95_sec=%.3f", total_batches, avg_batch, p95_batch)

    log_path: Path | None = None
    if error_log is not None:
        try:
            log_path = error_log.flush()
        except OSError as e:
            # Don't fail the upload if the error log cannot be written
            logger.error("failed to write error log: %s", e)
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    if report.success_count > 0 and on_success is not None:
        on_success(report)

    return UploadResult(session=session, report=report, elapsed_seconds=elapsed, error_log_path=log_path)
