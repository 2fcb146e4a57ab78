from __future__ import annotations

import asyncio
import io
from pathlib import Path

import pandas as pd
import pytest
from openpyxl import Workbook

from bulk_import.excel.reader import ParseError, ingest_file, normalize_sheet, read_path, read_spreadsheet

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def test_read_first_sheet_with_header_row(make_workbook):
    data = make_workbook([
        ["Nombre", "Email"],
        ["Dr. Juan Pérez", "juan.perez@hospital.com"],
        ["Dra. María García", "maria.garcia@clinica.com"],
    ])
    rows = read_spreadsheet(data)
    assert rows == [
        {"Nombre": "Dr. Juan Pérez", "Email": "juan.perez@hospital.com"},
        {"Nombre": "Dra. María García", "Email": "maria.garcia@clinica.com"},
    ]


def test_blank_cells_become_none_and_blank_rows_are_skipped(make_workbook):
    data = make_workbook([
        ["Nombre", "Teléfono"],
        ["Ana", None],
        [None, None],
        ["Luis", 5551234],
    ])
    rows = read_spreadsheet(data)
    assert len(rows) == 2
    assert rows[0] == {"Nombre": "Ana", "Teléfono": None}
    assert rows[1]["Nombre"] == "Luis"
    assert rows[1]["Teléfono"] == 5551234


def test_only_first_sheet_is_read(tmp_path: Path):
    path = tmp_path / "multi.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame([["Nombre"], ["first"]]).to_excel(writer, sheet_name="A", header=False, index=False)
        pd.DataFrame([["Nombre"], ["second"]]).to_excel(writer, sheet_name="B", header=False, index=False)
    rows = read_spreadsheet(path.read_bytes())
    assert rows == [{"Nombre": "first"}]


def test_normalize_sheet_headers():
    """Headers are stripped, blank headers dropped, first duplicate wins."""
    df = pd.DataFrame([
        [" Nombre ", None, "Nombre", "Email"],
        ["a", "ignored", "dup", "a@x"],
    ], dtype=object)
    assert normalize_sheet(df) == [{"Nombre": "a", "Email": "a@x"}]


def test_leading_blank_rows_before_header_are_skipped():
    df = pd.DataFrame([
        [None, None],
        ["  ", float("nan")],
        ["Nombre", "Email"],
        ["Ana", "ana@x"],
    ], dtype=object)
    assert normalize_sheet(df) == [{"Nombre": "Ana", "Email": "ana@x"}]


def test_header_below_empty_first_row():
    """Workbooks whose first row is empty still use the first filled row as header."""
    wb = Workbook()
    ws = wb.active
    ws["A2"] = "Nombre"
    ws["A3"] = "Ana"
    ws["A4"] = "Luis"
    buf = io.BytesIO()
    wb.save(buf)
    assert read_spreadsheet(buf.getvalue()) == [{"Nombre": "Ana"}, {"Nombre": "Luis"}]


def test_legacy_xls_workbook():
    data = (FIXTURES / "doctores_legacy.xls").read_bytes()
    assert read_spreadsheet(data) == [
        {"Nombre": "Ana", "Email": "ana@clinica.com"},
        {"Nombre": "Luis", "Email": "luis@hospital.com"},
    ]


def test_empty_sheet_yields_no_rows():
    assert normalize_sheet(pd.DataFrame()) == []
    assert normalize_sheet(pd.DataFrame([["Nombre", "Email"]], dtype=object)) == []


def test_header_only_workbook_yields_no_rows(make_workbook):
    assert read_spreadsheet(make_workbook([["Nombre", "Descripción"]])) == []


def test_corrupt_bytes_raise_parse_error():
    with pytest.raises(ParseError):
        read_spreadsheet(b"this is not a spreadsheet")


def test_empty_input_raises_parse_error():
    with pytest.raises(ParseError, match="empty"):
        read_spreadsheet(b"")


def test_ingest_file_runs_off_loop(make_workbook):
    data = make_workbook([["Nombre"], ["Cardiología"]])
    rows = asyncio.run(ingest_file(data))
    assert rows == [{"Nombre": "Cardiología"}]


def test_read_path_missing_file(tmp_path: Path):
    with pytest.raises(ParseError, match="cannot open"):
        asyncio.run(read_path(tmp_path / "nope.xlsx"))
