from __future__ import annotations

from datetime import datetime

import pytest

from patient_panel.services.dates import (
    PLACEHOLDER,
    contact_timestamp,
    format_contact_date,
    format_contact_date_for_input,
    parse_contact_date,
)


def test_parse_canonical():
    assert parse_contact_date("02/01/2024 09:00") == datetime(2024, 1, 2, 9, 0)


def test_parse_legacy_is_day_first():
    # "0102/2024" lost its first slash: day 01, month 02
    assert parse_contact_date("0102/2024 09:00") == datetime(2024, 2, 1, 9, 0)


def test_parse_date_only_is_midnight():
    assert parse_contact_date("10/03/2024") == datetime(2024, 3, 10, 0, 0)


def test_parse_strips_whitespace():
    assert parse_contact_date("  10/03/2024 ") == datetime(2024, 3, 10)


def test_parse_iso_fallback():
    assert parse_contact_date("2024-05-06T07:08:00") == datetime(2024, 5, 6, 7, 8)


def test_parse_iso_fallback_with_timezone_is_converted_to_utc():
    assert parse_contact_date("2024-05-06T07:08:00-03:00") == datetime(2024, 5, 6, 10, 8)


@pytest.mark.parametrize("text", [None, "", "ontem", "31/02/2024 10:00", "not a date at all"])
def test_parse_unparseable(text):
    assert parse_contact_date(text) is None


def test_contact_timestamp_zero_for_unparseable():
    assert contact_timestamp("") == 0.0
    assert contact_timestamp("sem data") == 0.0


def test_contact_timestamp_orders_dates():
    assert contact_timestamp("02/01/2024 09:00") > contact_timestamp("01/01/2024 23:59")
    assert contact_timestamp("01/01/1970 00:01") == 60.0


def test_format_contact_date():
    assert format_contact_date("") == PLACEHOLDER
    assert format_contact_date("0502/2024 09:30") == "05/02/2024 09:30"
    assert format_contact_date("10/03/2024") == "10/03/2024 00:00"
    assert format_contact_date("amanhã") == "amanhã"


def test_format_contact_date_for_input():
    assert format_contact_date_for_input("0502/2024 09:30") == "05/02/2024 09:30"
    assert format_contact_date_for_input("amanhã") == ""
    assert format_contact_date_for_input(None) == ""


def test_legacy_and_canonical_forms_of_same_date_sort_equal():
    assert contact_timestamp("01/02/2024 09:00") == contact_timestamp("0102/2024 09:00")
