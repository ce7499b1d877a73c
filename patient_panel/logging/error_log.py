from __future__ import annotations

import json
from dataclasses import asdict
from datetime import UTC, datetime
from functools import cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..models.error_record import ErrorRecord

"""JSON Lines error log for failed sheet operations.

Records are checked against the packaged error_log_schema.json when they are
buffered, so a line that reaches disk always has the five fixed keys. The file
(`logs/errors-YYYYMMDD-HHMMSS.log`, UTC) is opened lazily by the first flush
with something to write; the web layer flushes after every failed request.
"""

__all__ = [
    "ErrorRecord",
    "ErrorRecordError",
    "ErrorLogBuffer",
    "record_schema",
]

LOGS_DIR = Path("./logs")
RECORD_SCHEMA_PATH = Path(__file__).parent / "error_log_schema.json"
FILE_STAMP = "%Y%m%d-%H%M%S"


class ErrorRecordError(ValueError):
    """Record does not fit the error log schema."""


@cache
def record_schema() -> dict[str, Any]:
    return json.loads(RECORD_SCHEMA_PATH.read_text(encoding="utf-8"))


class ErrorLogBuffer:
    """Pending error records of one process, written out on flush()."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = LOGS_DIR if logs_dir is None else logs_dir
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self._path = self.logs_dir / f"errors-{datetime.now(UTC).strftime(FILE_STAMP)}.log"
        return self._path

    def append(self, record: ErrorRecord) -> None:
        try:
            jsonschema.validate(asdict(record), record_schema())
        except ValidationError as e:
            raise ErrorRecordError(f"invalid error record: {e.message}") from e
        self._pending.append(record)

    def record(self, operation: str, row: int, error_type: str, message: str) -> None:
        self.append(ErrorRecord.create(operation, row, error_type, message))

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Append pending records to the log file; None when nothing was pending."""
        if not self._pending:
            return None
        lines = "".join(f"{r.to_json_line()}\n" for r in self._pending)
        with self.file_path.open("a", encoding="utf-8") as fh:
            fh.write(lines)
        self._pending.clear()
        return self.file_path
