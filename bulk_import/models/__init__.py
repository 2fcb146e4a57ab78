"""Domain models for the pharmacy back-office bulk import tool."""

from .config_models import (
    ApiConfig,
    ColumnAlias,
    ImportConfig,
    ImportProfile,
    SharedParameter,
    UploadConfig,
)
from .error_record import ErrorRecord
from .import_session import ImportSession, ImportState
from .processing_result import (
    UNKNOWN_ROW,
    AggregateReport,
    BatchResponse,
    GlobalRowError,
    RowError,
)
from .row_data import MappedRecord, RawRow

__all__ = [
    # Configuration models
    "ApiConfig",
    "ColumnAlias",
    "ImportConfig",
    "ImportProfile",
    "SharedParameter",
    "UploadConfig",
    # Processing models
    "AggregateReport",
    "BatchResponse",
    "ErrorRecord",
    "GlobalRowError",
    "ImportSession",
    "ImportState",
    "MappedRecord",
    "RawRow",
    "RowError",
    "UNKNOWN_ROW",
]
