"""Sheet Client package: Google Sheets access and grid normalization."""

from .client import (
    ApiKeySheetsClient,
    ServiceAccountSheetsClient,
    SheetClient,
    build_sheet_client,
    validate_update_request,
)
from .errors import SheetClientError, SheetRequestError
from .reader import Sheet, normalize_values, pad_row

__all__ = [
    "ApiKeySheetsClient",
    "ServiceAccountSheetsClient",
    "Sheet",
    "SheetClient",
    "SheetClientError",
    "SheetRequestError",
    "build_sheet_client",
    "normalize_values",
    "pad_row",
    "validate_update_request",
]
