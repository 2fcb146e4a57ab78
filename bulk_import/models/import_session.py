from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any

from .config_models import ImportProfile
from .mapper import map_rows
from .processing_result import AggregateReport
from .row_data import MappedRecord, RawRow

"""ImportSession value object.

The session is frozen; every state change goes through a transition function
in ``bulk_import.services.session`` which returns a new instance. Mapped
records are derived from ``(raw_rows, parameters)`` on first access, so a
session with new parameters always re-maps from the stored raw rows.
"""

__all__ = [
    "ImportState",
    "ImportSession",
    "PREVIEW_LIMIT",
]

PREVIEW_LIMIT = 10


class ImportState(Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    PARSED = "parsed"
    UPLOADING = "uploading"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ImportSession:
    """Lifecycle state of one import.

    Attributes:
        profile: entity being imported
        state: lifecycle state
        parameters: shared parameter values keyed by payload name
        file_name: name of the selected spreadsheet, if any
        raw_rows: decoded rows of the selected spreadsheet
        report: in-progress or final report, None before the first upload
        progress: upload progress in percent (0-100)
    """
    profile: ImportProfile
    state: ImportState = ImportState.IDLE
    parameters: dict[str, Any] = field(default_factory=dict)
    file_name: str | None = None
    raw_rows: tuple[RawRow, ...] = ()
    report: AggregateReport | None = None
    progress: int = 0

    @cached_property
    def records(self) -> tuple[MappedRecord, ...]:
        return map_rows(self.profile, self.raw_rows, self.parameters)

    @property
    def record_count(self) -> int:
        return len(self.raw_rows)

    @property
    def inputs_locked(self) -> bool:
        return self.state is ImportState.UPLOADING

    @property
    def missing_parameters(self) -> list[str]:
        return self.profile.missing_parameters(self.parameters)

    def preview(self, limit: int = PREVIEW_LIMIT) -> tuple[MappedRecord, ...]:
        return self.records[:limit]
