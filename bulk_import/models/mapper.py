from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .config_models import ColumnAlias, ImportProfile
from .row_data import MappedRecord, RawRow, RawValue, is_blank

"""Record mapping: RawRow + shared parameters -> MappedRecord.

Mapping is total. A row is never rejected here; missing columns fall back to
the alias default and business validation is left to the bulk endpoint.
"""

__all__ = [
    "resolve_column",
    "map_row",
    "map_rows",
]


def _as_text(value: RawValue) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        # numeric cells (phone, licence) come back as floats from some readers
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def resolve_column(row: Mapping[str, RawValue], column: ColumnAlias) -> str | None:
    """Return the first non-blank aliased cell as text, else the alias default."""
    for header in column.headers:
        value = row.get(header)
        if not is_blank(value):
            return _as_text(value)
    return column.default


def _parameter_value(value: Any, multiple: bool) -> Any:
    if value is None:
        return [] if multiple else None
    if multiple:
        return list(value)
    return value


def map_row(
    profile: ImportProfile,
    row: RawRow,
    parameters: Mapping[str, Any],
    position: int,
) -> MappedRecord:
    fields: dict[str, Any] = {}
    for column in profile.columns:
        fields[column.field] = resolve_column(row, column)
    for p in profile.parameters:
        fields[p.name] = _parameter_value(parameters.get(p.name), p.multiple)
    return MappedRecord(position=position, fields=fields)


def map_rows(
    profile: ImportProfile,
    rows: Iterable[RawRow],
    parameters: Mapping[str, Any],
) -> tuple[MappedRecord, ...]:
    """Map every row in order; output length always equals input length."""
    return tuple(
        map_row(profile, row, parameters, position)
        for position, row in enumerate(rows)
    )
