from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

Every failed load, save or status toggle produces one record. `row` is the
1-based sheet row the operation targeted, or -1 when the failure is not tied
to a row (e.g. a full sheet read).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        operation: Workflow operation that failed (LOAD, SAVE, TOGGLE_STATUS, ...)
        row: Sheet row number (1-based). -1 when not row specific
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Upstream error message or description
    """
    timestamp: str  # ISO8601 UTC
    operation: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(operation: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            operation=operation,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # fixed schema: dataclass fields only
        return json.dumps(asdict(self), ensure_ascii=False)
