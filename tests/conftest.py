# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from pathlib import Path
from typing import Any

import httpx
import pandas as pd
import pytest

from bulk_import.logging.init import reset_logging
from bulk_import.models.processing_result import BatchResponse
from bulk_import.models.row_data import MappedRecord


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handlers bind sys.stdout at creation; capsys needs a new one per test
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("API_BASE_URL", raising=False)
        monkeypatch.delenv("API_TOKEN", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: http://backoffice.test/api
  timeout_seconds: 30
upload:
  batch_size: 50
  pacing_delay_ms: 0
logs_directory: ./logs
profiles:
  specialties:
    batch_size: 20
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def workbook_bytes(rows: list[list[Any]], sheet_name: str = "Sheet1") -> bytes:
    """Build an .xlsx in memory; the first row is written as the header row."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buf.getvalue()


def doctor_rows(n: int) -> list[list[Any]]:
    header = ["Nombre", "Email", "Teléfono", "Licencia", "Biografía"]
    return [header] + [
        [f"Dr. {i}", f"doc{i}@hospital.com", f"555-{i:04d}", f"MED-{i:05d}", ""]
        for i in range(1, n + 1)
    ]


@pytest.fixture()
def make_workbook():
    return workbook_bytes


@pytest.fixture()
def doctors_workbook(temp_workdir: Path):
    def _make(n: int) -> Path:
        path = temp_workdir / "data" / "doctores.xlsx"
        path.write_bytes(workbook_bytes(doctor_rows(n), sheet_name="Doctores"))
        return path
    return _make


def make_records(n: int) -> tuple[MappedRecord, ...]:
    return tuple(MappedRecord(position=i, fields={"name": f"r{i}"}) for i in range(n))


@pytest.fixture()
def records():
    return make_records


class FakeSubmit:
    """Records each submitted batch and answers with all-created responses.

    ``fail_on`` lists 1-based batch numbers that raise instead.
    """

    def __init__(self, fail_on: tuple[int, ...] = (), exc: Exception | None = None) -> None:
        self.fail_on = fail_on
        self.exc = exc
        self.calls: list[tuple[MappedRecord, ...]] = []

    async def __call__(self, records) -> BatchResponse:
        self.calls.append(tuple(records))
        if len(self.calls) in self.fail_on:
            raise self.exc or RuntimeError("boom")
        return BatchResponse(created=len(records), failed=0, total=len(records))


@pytest.fixture()
def fake_submit():
    return FakeSubmit


class FakeSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def fake_sleep() -> FakeSleep:
    return FakeSleep()


def bulk_handler(failed_indexes: dict[int, str] | None = None, status_code: int = 201):
    """httpx.MockTransport handler emulating the administrator bulk endpoint.

    ``failed_indexes`` maps batch-local index -> error text for every batch.
    """
    import json

    failed_indexes = failed_indexes or {}
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = json.loads(request.content)
        items = next(iter(body.values()))
        errors = [{"index": i, "error": msg} for i, msg in failed_indexes.items() if i < len(items)]
        return httpx.Response(
            status_code,
            json={
                "status": "success",
                "message": "bulk processed",
                "data": {
                    "success": [],
                    "errors": errors,
                    "summary": {
                        "total": len(items),
                        "created": len(items) - len(errors),
                        "failed": len(errors),
                    },
                },
            },
        )

    handler.requests = seen  # type: ignore[attr-defined]
    return handler


@pytest.fixture()
def mock_bulk():
    return bulk_handler
