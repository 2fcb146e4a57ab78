from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import httpx

from bulk_import.api.client import SubmissionClient
from bulk_import.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main as cli_main

"""Exit code contract: 0 all succeeded, 2 completed with failures, 1 fatal."""

DOCTOR_PARAMS = ["-p", "country_id=1", "-p", "specialties=2,3"]


def _mock_client(handler):
    return lambda api: SubmissionClient(api, transport=httpx.MockTransport(handler))


def test_exit_code_fatal_missing_explicit_config(temp_workdir: Path, capsys):
    code = cli_main(["--config", "missing.yml", "template", "doctors"])
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_no_base_url(temp_workdir: Path, doctors_workbook, capsys):
    code = cli_main(["upload", "doctors", str(doctors_workbook(2)), *DOCTOR_PARAMS])
    assert code == EXIT_FATAL
    assert "ERROR config: no API base URL" in capsys.readouterr().out


def test_exit_code_fatal_missing_parameters(temp_workdir: Path, write_config, doctors_workbook, capsys):
    code = cli_main(["upload", "doctors", str(doctors_workbook(2)), "-p", "country_id=1"])
    assert code == EXIT_FATAL
    assert "ERROR session: missing required parameters: specialties" in capsys.readouterr().out


def test_exit_code_fatal_unreadable_file(temp_workdir: Path, write_config, capsys):
    broken = temp_workdir / "data" / "broken.xlsx"
    broken.write_bytes(b"not a workbook")
    with patch("bulk_import.cli.__main__.SubmissionClient") as mock_client:
        code = cli_main(["upload", "specialties", str(broken)])
    assert code == EXIT_FATAL
    assert "ERROR file:" in capsys.readouterr().out
    mock_client.assert_not_called()


def test_exit_code_fatal_no_data(temp_workdir: Path, write_config, make_workbook, capsys):
    empty = temp_workdir / "data" / "empty.xlsx"
    empty.write_bytes(make_workbook([["Nombre", "Descripción"]]))
    code = cli_main(["upload", "specialties", str(empty)])
    assert code == EXIT_FATAL
    assert "ERROR session: no data to upload" in capsys.readouterr().out


def test_exit_code_all_success(temp_workdir: Path, write_config, doctors_workbook, mock_bulk, capsys):
    with patch("bulk_import.cli.__main__.SubmissionClient", _mock_client(mock_bulk())):
        code = cli_main(["upload", "doctors", str(doctors_workbook(3)), *DOCTOR_PARAMS])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "SUMMARY entity=doctors records=3 batches=1/1 success=3 failed=0 errors=0" in out


def test_exit_code_partial_failure(temp_workdir: Path, write_config, doctors_workbook, mock_bulk, capsys):
    handler = mock_bulk({0: "email duplicado"})
    with patch("bulk_import.cli.__main__.SubmissionClient", _mock_client(handler)):
        code = cli_main(["upload", "doctors", str(doctors_workbook(3)), *DOCTOR_PARAMS])
    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL_FAILURE
    assert "success=2 failed=1 errors=1" in out
    assert "ERROR row 1: email duplicado" in out
