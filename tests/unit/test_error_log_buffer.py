from __future__ import annotations

import json
import re
from pathlib import Path

from bulk_import.logging.error_log import ErrorLogBuffer
from bulk_import.models.error_record import BATCH_TRANSPORT_ERROR, ROW_VALIDATION_ERROR, ErrorRecord


def test_error_record_create_stamps_utc():
    record = ErrorRecord.create("doctores.xlsx", "doctors", 3, ROW_VALIDATION_ERROR, "email duplicado")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z", record.timestamp)
    assert record.row == 3


def test_to_json_line_keeps_non_ascii():
    record = ErrorRecord("2025-01-01T00:00:00Z", "doctores.xlsx", "doctors", 2, ROW_VALIDATION_ERROR, "Teléfono inválido")
    line = record.to_json_line()
    assert "Teléfono inválido" in line
    assert json.loads(line) == {
        "timestamp": "2025-01-01T00:00:00Z",
        "file": "doctores.xlsx",
        "entity": "doctors",
        "row": 2,
        "error_type": "ROW_VALIDATION_ERROR",
        "message": "Teléfono inválido",
    }


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    buf.append(ErrorRecord.create("a.xlsx", "doctors", 1, ROW_VALIDATION_ERROR, "x"))
    buf.append(ErrorRecord.create("a.xlsx", "doctors", -1, BATCH_TRANSPORT_ERROR, "batch 1 failed: y"))
    assert len(buf) == 2

    path = buf.flush()
    assert path is not None
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    assert path.parent == tmp_path / "logs"
    rows = [json.loads(line)["row"] for line in path.read_text(encoding="utf-8").splitlines()]
    assert rows == [1, -1]
    assert len(buf) == 0


def test_flush_without_records_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_second_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("a.xlsx", "specialties", 1, ROW_VALIDATION_ERROR, "x"))
    first = buf.flush()
    buf.append(ErrorRecord.create("a.xlsx", "specialties", 2, ROW_VALIDATION_ERROR, "y"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2
