from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per itemized import error. ``row`` is the 1-based data row number
in the uploaded file, or -1 when the failure covers a whole batch and no row
can be named.
"""

__all__ = [
    "ErrorRecord",
    "ROW_VALIDATION_ERROR",
    "BATCH_TRANSPORT_ERROR",
]

ROW_VALIDATION_ERROR = "ROW_VALIDATION_ERROR"
BATCH_TRANSPORT_ERROR = "BATCH_TRANSPORT_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: uploaded spreadsheet name
        entity: imported entity (doctors, specialties)
        row: 1-based data row number, -1 for batch-level errors
        error_type: classification in UPPER_SNAKE_CASE
        message: endpoint or transport error message
    """
    timestamp: str
    file: str
    entity: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, entity: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            entity=entity,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # asdict keeps the key set fixed to the dataclass fields
        return json.dumps(asdict(self), ensure_ascii=False)
