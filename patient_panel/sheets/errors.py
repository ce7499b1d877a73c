from __future__ import annotations

from typing import Any

"""Sheet Client error taxonomy.

SheetClientError carries the HTTP status and upstream details so the proxy
route can mirror them back as `{"error": ..., "details": ...}`.
SheetRequestError is raised before any remote call when a request is
malformed.
"""

__all__ = [
    "SheetClientError",
    "SheetRequestError",
]


class SheetClientError(Exception):
    """A read / append / update against the spreadsheet failed."""

    def __init__(self, message: str, status: int = 500, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    @property
    def error_type(self) -> str:
        return "SHEET_REQUEST_ERROR" if isinstance(self, SheetRequestError) else "SHEET_API_ERROR"

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class SheetRequestError(SheetClientError):
    """Malformed request rejected locally (never reaches the Sheets API)."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message, status=400, details=details)
