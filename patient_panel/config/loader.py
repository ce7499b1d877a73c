from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AuthConfig, PanelConfig, SheetSourceConfig, UiConfig

"""Config loader.

Responsibilities:
- Load YAML config/panel.yml
- Validate it against the packaged config_schema.json
- Apply defaults (tab "pacientes", service account mode, page size 10, ...)
- Attach secrets from the environment; nothing secret is ever read from YAML
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/panel.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails validation (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> PanelConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    sheets_raw = data["sheets"]
    ui_raw = data.get("ui", {})
    auth_raw = data.get("auth", {})

    # SPREADSHEET_ID wins over the YAML value so one config serves several sheets
    spreadsheet_id = _env("SPREADSHEET_ID") or sheets_raw["spreadsheet_id"]
    if not spreadsheet_id:
        raise ConfigError("spreadsheet_id is empty (set sheets.spreadsheet_id or SPREADSHEET_ID)")

    sheets = SheetSourceConfig(
        spreadsheet_id=spreadsheet_id,
        tab_name=sheets_raw.get("tab_name", "pacientes"),
        mode=sheets_raw.get("mode", "service_account"),
        request_timeout=float(sheets_raw.get("request_timeout", 30)),
        service_account_json=_env("GOOGLE_SERVICE_ACCOUNT_JSON"),
        service_account_file=_env("GOOGLE_APPLICATION_CREDENTIALS"),
        api_key=_env("SHEETS_API_KEY"),
    )

    ui = UiConfig(
        default_page_size=ui_raw.get("default_page_size", 10),
        page_size_options=tuple(ui_raw.get("page_size_options", (5, 10, 20, 50))),
    )
    if ui.default_page_size not in ui.page_size_options:
        raise ConfigError(
            f"default_page_size {ui.default_page_size} is not one of page_size_options {list(ui.page_size_options)}"
        )

    auth = AuthConfig(
        cookie_name=auth_raw.get("cookie_name", "auth-token"),
        cookie_max_age=auth_raw.get("cookie_max_age", 86400),
        secure_cookies=auth_raw.get("secure_cookies", False),
        firebase_api_key=_env("FIREBASE_WEB_API_KEY"),
    )

    return PanelConfig(
        sheets=sheets,
        ui=ui,
        auth=auth,
        secret_key=_env("FLASK_SECRET_KEY"),
    )
