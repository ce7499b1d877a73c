# Shared pytest fixtures
from __future__ import annotations

import copy
import tempfile
from pathlib import Path
from typing import Any

import pytest

from patient_panel.auth.firebase import INVALID_CREDENTIAL, AuthError, AuthUser
from patient_panel.auth.session import SessionRegistry
from patient_panel.logging.error_log import ErrorLogBuffer
from patient_panel.models.config_models import AuthConfig, PanelConfig, SheetSourceConfig, UiConfig
from patient_panel.sheets.errors import SheetClientError

SECRET_ENV_VARS = (
    "SPREADSHEET_ID",
    "GOOGLE_SERVICE_ACCOUNT_JSON",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "SHEETS_API_KEY",
    "FIREBASE_WEB_API_KEY",
    "FLASK_SECRET_KEY",
)

HEADER = ["Nome", "Telefone", "CPF", "Status", "Último Contato", "Email"]


class FakeSheetClient:
    """In-memory SheetClient recording every write."""

    def __init__(self, sheet: list[list[str]] | None = None) -> None:
        self.sheet = copy.deepcopy(sheet or [])
        self.read_error: SheetClientError | None = None
        self.update_error: SheetClientError | None = None
        self.append_error: SheetClientError | None = None
        self.reads = 0
        self.updates: list[tuple[int, list[str]]] = []
        self.appends: list[list[list[str]]] = []

    def read(self) -> list[list[str]]:
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        return copy.deepcopy(self.sheet)

    def append(self, records: list[list[Any]]) -> dict[str, Any]:
        self.appends.append(records)
        if self.append_error is not None:
            raise self.append_error
        self.sheet.extend(copy.deepcopy(records))
        return {"updates": {"updatedRows": len(records)}}

    def update(self, row_index: int, values: list[Any]) -> dict[str, Any]:
        self.updates.append((row_index, list(values)))
        if self.update_error is not None:
            raise self.update_error
        self.sheet[row_index - 1] = list(values)
        return {"updatedRange": f"pacientes!A{row_index}", "updatedCells": len(values)}


class FakeAuthClient:
    """Accepts any email with password "secret"."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def sign_in(self, email: str, password: str) -> AuthUser:
        self.calls.append(email)
        if password != "secret":
            raise AuthError(INVALID_CREDENTIAL, "INVALID_LOGIN_CREDENTIALS")
        return AuthUser(uid=f"uid-{email}", email=email, id_token=f"token-{email}")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so values loaded from .env during a test are rolled back too
    for name in SECRET_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sheets:
  spreadsheet_id: sheet-123
  tab_name: pacientes
  mode: service_account
  request_timeout: 15
ui:
  default_page_size: 10
  page_size_options: [5, 10, 20, 50]
auth:
  cookie_name: auth-token
  cookie_max_age: 86400
  secure_cookies: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "panel.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_sheet() -> list[list[str]]:
    return [
        list(HEADER),
        ["Ana", "11999998888", "12345678901", "", "01/01/2024 10:00", "ana@example.com"],
        ["Bruno", "21988887777", "98765432100", "Atendido", "0502/2024 09:30", "bruno@example.com"],
        ["Carla", "31977776666", "", "Pendente", "", ""],
        ["Diego", "41966665555", "11122233344", "Em análise", "10/03/2024"],
    ]


@pytest.fixture()
def fake_client(sample_sheet) -> FakeSheetClient:
    return FakeSheetClient(sample_sheet)


@pytest.fixture()
def error_log(tmp_path: Path) -> ErrorLogBuffer:
    return ErrorLogBuffer(logs_dir=tmp_path / "logs")


@pytest.fixture()
def panel_config() -> PanelConfig:
    return PanelConfig(
        sheets=SheetSourceConfig(spreadsheet_id="sheet-123"),
        ui=UiConfig(),
        auth=AuthConfig(),
        secret_key="test-secret",
    )


@pytest.fixture()
def app(panel_config, fake_client, error_log):
    from patient_panel.web.app import create_app

    flask_app = create_app(
        panel_config,
        sheet_client=fake_client,
        auth_client=FakeAuthClient(),
        registry=SessionRegistry(panel_config.ui.default_page_size, error_log=error_log),
        error_log=error_log,
    )
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def signed_in_client(client):
    res = client.post("/login", data={"email": "staff@example.com", "password": "secret"})
    assert res.status_code == 302
    return client


@pytest.fixture()
def make_client():
    """Factory for FakeSheetClient over an arbitrary grid."""
    return FakeSheetClient
