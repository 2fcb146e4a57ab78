from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.row_data import RawRow, is_blank

"""Spreadsheet ingestion.

Only the first sheet is read. Its first non-blank row is the header; every
following row that is not entirely blank becomes one RawRow. Decoding is all-or-nothing:
any failure raises ParseError and no rows are returned.
"""

__all__ = [
    "ParseError",
    "read_spreadsheet",
    "normalize_sheet",
    "ingest_file",
    "read_path",
]


class ParseError(Exception):
    """Raised when the uploaded file cannot be decoded into rows."""


def _to_python(value: Any) -> Any:
    if is_blank(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    # numpy scalars -> plain python
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        return value.item()
    return value


def normalize_sheet(df: pd.DataFrame) -> list[RawRow]:
    """Turn a header-less raw DataFrame into RawRows.

    Steps:
    1. The first row with any non-blank cell is the header; header cells are
       stripped, blank ones dropped
    2. When a header repeats, the first column keeps the name
    3. Rows where every kept cell is blank are skipped
    4. Blank cells become None
    """
    header_at = next(
        (i for i, cells in enumerate(df.itertuples(index=False, name=None))
         if not all(is_blank(c) for c in cells)),
        None,
    )
    if header_at is None:
        return []

    columns: list[tuple[int, str]] = []
    seen: set[str] = set()
    for pos, cell in enumerate(df.iloc[header_at].tolist()):
        if is_blank(cell):
            continue
        name = str(cell).strip()
        if name in seen:
            continue
        seen.add(name)
        columns.append((pos, name))

    rows: list[RawRow] = []
    for raw in df.iloc[header_at + 1:].itertuples(index=False, name=None):
        row: RawRow = {name: _to_python(raw[pos]) for pos, name in columns}
        if all(v is None for v in row.values()):
            continue
        rows.append(row)
    return rows


def read_spreadsheet(data: bytes) -> list[RawRow]:
    if not data:
        raise ParseError("empty file")
    try:
        df = pd.read_excel(
            io.BytesIO(data),
            sheet_name=0,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_values=[""],
        )
    except Exception as e:  # pandas/openpyxl/xlrd raise a wide range of types
        raise ParseError(f"unreadable spreadsheet: {e}") from e
    return normalize_sheet(df)


async def ingest_file(data: bytes) -> list[RawRow]:
    """Decode spreadsheet bytes off the event loop."""
    return await asyncio.to_thread(read_spreadsheet, data)


async def read_path(path: Path) -> list[RawRow]:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ParseError(f"cannot open '{path}': {e}") from e
    return await ingest_file(data)
