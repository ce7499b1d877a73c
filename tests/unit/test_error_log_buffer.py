from __future__ import annotations

import json
from pathlib import Path

import pytest

from patient_panel.logging.error_log import ErrorLogBuffer, ErrorRecordError
from patient_panel.models.error_record import ErrorRecord


def test_flush_empty_buffer_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_writes_json_lines_and_clears(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    buf.record("SAVE", 3, "SHEET_API_ERROR", "Erro ao atualizar")
    buf.append(ErrorRecord.create("LOAD", -1, "SHEET_API_ERROR", "quota"))
    assert len(buf) == 2
    path = buf.flush()
    assert path is not None and path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["operation"] for line in lines] == ["SAVE", "LOAD"]
    assert len(buf) == 0


def test_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    buf.record("SAVE", 2, "SHEET_API_ERROR", "first")
    first = buf.flush()
    buf.record("TOGGLE_STATUS", 2, "SHEET_API_ERROR", "second")
    second = buf.flush()
    assert first == second
    assert len(first.read_text(encoding="utf-8").splitlines()) == 2


def test_default_logs_dir_is_relative_to_cwd(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.record("LOAD", -1, "SHEET_API_ERROR", "x")
    path = buf.flush()
    assert path.parent.resolve() == (temp_workdir / "logs").resolve()


def test_error_record_json_keeps_non_ascii():
    line = ErrorRecord.create("SAVE", 2, "SHEET_API_ERROR", "Erro ao salvar. Tente novamente.").to_json_line()
    data = json.loads(line)
    assert data["timestamp"].endswith("Z")
    assert ErrorRecord.create("SAVE", 2, "X", "sessão").to_json_line().count("sessão") == 1


@pytest.mark.parametrize(
    "operation,row,error_type",
    [("DELETE", 2, "SHEET_API_ERROR"), ("SAVE", -2, "SHEET_API_ERROR"), ("SAVE", 2, "sheet_api_error")],
)
def test_append_rejects_records_outside_schema(tmp_path: Path, operation, row, error_type):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    with pytest.raises(ErrorRecordError):
        buf.record(operation, row, error_type, "x")
    assert len(buf) == 0
    assert buf.flush() is None
