from __future__ import annotations

import http.client
import json
import logging
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

import google_auth_httplib2
import httplib2
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..models.config_models import SHEETS_MODE_API_KEY, SheetSourceConfig
from .errors import SheetClientError, SheetRequestError
from .reader import Sheet, normalize_values

if TYPE_CHECKING:
    from googleapiclient.discovery import Resource

"""Sheet Client: read / append / single-row update against one spreadsheet tab.

Two implementations share the SheetClient protocol:

- ServiceAccountSheetsClient: Google API client authorised by a service
  account. Authoritative path, supports writes.
- ApiKeySheetsClient: direct `requests` fetch with a public API key. Reads
  only; the Sheets API refuses writes authorised by an API key, so append /
  update are rejected locally.

Rows are addressed 1-based, the header occupying row 1.
"""

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
SHEETS_API_BASE = "https://sheets.googleapis.com/v4"
VALUE_INPUT_OPTION = "USER_ENTERED"

__all__ = [
    "SheetClient",
    "ServiceAccountSheetsClient",
    "ApiKeySheetsClient",
    "build_sheet_client",
    "validate_update_request",
    "validate_append_request",
]


class SheetClient(Protocol):
    def read(self) -> Sheet: ...

    def append(self, records: list[list[Any]]) -> dict[str, Any]: ...

    def update(self, row_index: int, values: list[Any]) -> dict[str, Any]: ...


def validate_update_request(row_index: Any, values: Any) -> None:
    """Reject a malformed single-row update before it reaches the API."""
    # bool is an int subclass; True must not address row 1
    if row_index is None or isinstance(row_index, bool) or not isinstance(row_index, int):
        raise SheetRequestError("rowIndex e values são obrigatórios", details={"rowIndex": row_index})
    if row_index < 1:
        raise SheetRequestError("rowIndex deve ser >= 1", details={"rowIndex": row_index})
    if not isinstance(values, list):
        raise SheetRequestError("values deve ser uma lista", details={"values": type(values).__name__})


def validate_append_request(records: Any) -> None:
    if not isinstance(records, list) or not all(isinstance(r, list) for r in records):
        raise SheetRequestError("values deve ser uma lista de linhas")


def a1_range(tab_name: str, cell: str | None = None) -> str:
    """A1 notation for a whole tab or a cell within it ('Tab Name'!A5)."""
    quoted = "'" + tab_name.replace("'", "''") + "'"
    return f"{quoted}!{cell}" if cell else quoted


def _http_error_details(e: HttpError) -> Any:
    try:
        return json.loads(e.content.decode("utf-8"))
    except (ValueError, AttributeError):
        return str(e)


class ServiceAccountSheetsClient:
    """Sheets API v4 client authorised by a service account.

    Credentials come from the raw JSON (GOOGLE_SERVICE_ACCOUNT_JSON) or a key
    file path (GOOGLE_APPLICATION_CREDENTIALS). The discovery service is built
    lazily on first use and then reused.
    """

    def __init__(self, config: SheetSourceConfig, service: Resource | None = None) -> None:
        self.config = config
        self._service = service

    def _credentials(self) -> service_account.Credentials:
        if self.config.service_account_json:
            try:
                info = json.loads(self.config.service_account_json)
            except json.JSONDecodeError as e:
                raise SheetClientError("credenciais da service account inválidas", details=str(e)) from e
            return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        if self.config.service_account_file:
            return service_account.Credentials.from_service_account_file(
                self.config.service_account_file, scopes=SCOPES
            )
        raise SheetClientError(
            "credenciais da service account ausentes",
            details="set GOOGLE_SERVICE_ACCOUNT_JSON or GOOGLE_APPLICATION_CREDENTIALS",
        )

    @property
    def service(self) -> Resource:
        if self._service is None:
            try:
                creds = self._credentials()
                authed = google_auth_httplib2.AuthorizedHttp(
                    creds, http=httplib2.Http(timeout=self.config.request_timeout)
                )
                self._service = build("sheets", "v4", http=authed, cache_discovery=False)
            except (GoogleAuthError, OSError, ValueError) as e:
                raise SheetClientError("falha ao inicializar o cliente do Google Sheets", details=str(e)) from e
        return self._service

    def _execute(self, request: Any, message: str) -> dict[str, Any]:
        try:
            return request.execute() or {}
        except HttpError as e:
            raise SheetClientError(message, status=e.resp.status, details=_http_error_details(e)) from e
        except (GoogleAuthError, OSError, httplib2.HttpLib2Error, http.client.HTTPException) as e:
            raise SheetClientError("Erro interno", status=500, details=str(e)) from e

    def read(self) -> Sheet:
        values_api = self.service.spreadsheets().values()
        data = self._execute(
            values_api.get(spreadsheetId=self.config.spreadsheet_id, range=a1_range(self.config.tab_name)),
            "Erro ao buscar dados na planilha",
        )
        sheet = normalize_values(data.get("values", []))
        logger.debug(f"sheets read rows={len(sheet)} tab={self.config.tab_name}")
        return sheet

    def append(self, records: list[list[Any]]) -> dict[str, Any]:
        validate_append_request(records)
        values_api = self.service.spreadsheets().values()
        result = self._execute(
            values_api.append(
                spreadsheetId=self.config.spreadsheet_id,
                range=a1_range(self.config.tab_name),
                valueInputOption=VALUE_INPUT_OPTION,
                insertDataOption="INSERT_ROWS",
                body={"majorDimension": "ROWS", "values": records},
            ),
            "Erro ao salvar",
        )
        logger.debug(f"sheets append rows={len(records)}")
        return result

    def update(self, row_index: int, values: list[Any]) -> dict[str, Any]:
        validate_update_request(row_index, values)
        values_api = self.service.spreadsheets().values()
        result = self._execute(
            values_api.update(
                spreadsheetId=self.config.spreadsheet_id,
                range=a1_range(self.config.tab_name, f"A{row_index}"),
                valueInputOption=VALUE_INPUT_OPTION,
                body={"majorDimension": "ROWS", "values": [values]},
            ),
            "Erro ao atualizar",
        )
        logger.debug(f"sheets update row={row_index} cells={len(values)}")
        return result


class ApiKeySheetsClient:
    """Read-only client using a public API key over plain HTTPS."""

    def __init__(self, config: SheetSourceConfig, session: requests.Session | None = None) -> None:
        if not config.api_key:
            raise SheetClientError("SHEETS_API_KEY ausente", details="api_key mode requires SHEETS_API_KEY")
        self.config = config
        self.session = session or requests.Session()

    def read(self) -> Sheet:
        url = (
            f"{SHEETS_API_BASE}/spreadsheets/{self.config.spreadsheet_id}"
            f"/values/{quote(a1_range(self.config.tab_name), safe='')}"
        )
        try:
            res = self.session.get(url, params={"key": self.config.api_key}, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            raise SheetClientError("Erro interno", status=500, details=str(e)) from e
        if not res.ok:
            raise SheetClientError("Erro ao buscar dados na planilha", status=res.status_code, details=res.text)
        try:
            data = res.json()
        except ValueError as e:
            raise SheetClientError("resposta inválida da planilha", status=502, details=str(e)) from e
        return normalize_values(data.get("values", []))

    def append(self, records: list[list[Any]]) -> dict[str, Any]:
        validate_append_request(records)
        raise SheetRequestError("escrita exige service account (sheets.mode=service_account)")

    def update(self, row_index: int, values: list[Any]) -> dict[str, Any]:
        validate_update_request(row_index, values)
        raise SheetRequestError("escrita exige service account (sheets.mode=service_account)")


def build_sheet_client(config: SheetSourceConfig) -> SheetClient:
    if config.mode == SHEETS_MODE_API_KEY:
        logger.warning("sheets: api_key mode is read-only; edits will be rejected")
        return ApiKeySheetsClient(config)
    return ServiceAccountSheetsClient(config)
