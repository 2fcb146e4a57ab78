from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

"""Row models for the bulk import pipeline.

RawRow is one decoded spreadsheet row (header -> cell value). MappedRecord is
the endpoint-shaped record produced from a RawRow plus the shared parameters,
tagged with its zero-based position in the parsed sequence.
"""

__all__ = [
    "RawValue",
    "RawRow",
    "MappedRecord",
    "is_blank",
]

RawValue = Union[str, int, float, bool, datetime, None]
RawRow = dict[str, RawValue]  # insertion order == column order in the sheet


def is_blank(value: Any) -> bool:
    """True for None, whitespace-only text and NaN/NaT cells."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        # NaN and NaT are the only values unequal to themselves
        return bool(value != value)
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class MappedRecord:
    """Endpoint-shaped record for one spreadsheet data row.

    ``position`` is the index of the row in the full parsed sequence (0 = first
    data row below the header). Fields holding ``None`` are treated as absent
    and left out of the request payload.
    """
    position: int
    fields: dict[str, Any]

    @property
    def row_number(self) -> int:
        """1-based row number as shown to the operator."""
        return self.position + 1

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def to_payload(self) -> dict[str, Any]:
        return {k: v for k, v in self.fields.items() if v is not None}
