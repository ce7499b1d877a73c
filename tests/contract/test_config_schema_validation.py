from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from patient_panel.config.loader import SCHEMA_PATH

"""Config schema contract test: shipped config/panel.yml and the packaged schema."""


@pytest.fixture()
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example(schema, sample_config_yaml):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), schema)


def test_config_schema_minimal_example(schema):
    jsonschema.validate({"sheets": {"spreadsheet_id": "abc"}}, schema)


def test_config_schema_missing_sheets(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"ui": {"default_page_size": 10}}, schema)


@pytest.mark.parametrize(
    "config",
    [
        {"sheets": {"spreadsheet_id": "abc", "service_account_json": "{}"}},
        {"sheets": {"spreadsheet_id": "abc"}, "auth": {"firebase_api_key": "k"}},
        {"sheets": {"spreadsheet_id": "abc", "request_timeout": 0}},
        {"sheets": {"spreadsheet_id": "abc"}, "ui": {"page_size_options": []}},
        {"sheets": {"spreadsheet_id": "abc"}, "ui": {"default_page_size": "10"}},
    ],
)
def test_config_schema_rejects(schema, config):
    # secrets are environment only, so they are unknown keys here
    with pytest.raises(ValidationError):
        jsonschema.validate(config, schema)
