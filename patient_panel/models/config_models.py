from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the patient panel.

These are the typed views over config/panel.yml produced by
patient_panel.config.loader. Secrets never live here: they are read from the
environment (optionally seeded from .env) and attached at load time.
"""

__all__ = [
    "SheetSourceConfig",
    "UiConfig",
    "AuthConfig",
    "PanelConfig",
]

SHEETS_MODE_SERVICE_ACCOUNT = "service_account"
SHEETS_MODE_API_KEY = "api_key"


@dataclass(frozen=True)
class SheetSourceConfig:
    """Where the patient records live and how to reach them.

    `mode` selects the Sheet Client implementation. The service account path is
    the authoritative one; the API key path can only read.
    """
    spreadsheet_id: str
    tab_name: str = "pacientes"
    mode: str = SHEETS_MODE_SERVICE_ACCOUNT
    request_timeout: float = 30.0
    service_account_json: str | None = None  # GOOGLE_SERVICE_ACCOUNT_JSON
    service_account_file: str | None = None  # GOOGLE_APPLICATION_CREDENTIALS
    api_key: str | None = None  # SHEETS_API_KEY


@dataclass(frozen=True)
class UiConfig:
    default_page_size: int = 10
    page_size_options: tuple[int, ...] = (5, 10, 20, 50)


@dataclass(frozen=True)
class AuthConfig:
    """Session cookie and identity provider settings."""
    cookie_name: str = "auth-token"
    cookie_max_age: int = 86400  # 1 day
    secure_cookies: bool = False
    firebase_api_key: str | None = None  # FIREBASE_WEB_API_KEY


@dataclass(frozen=True)
class PanelConfig:
    """Root configuration object for the panel."""
    sheets: SheetSourceConfig
    ui: UiConfig = field(default_factory=UiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    secret_key: str | None = None  # FLASK_SECRET_KEY
