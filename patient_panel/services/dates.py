from __future__ import annotations

import re
import warnings
from datetime import datetime

import pandas as pd

"""Last-contact date parsing and rendering.

Accepted inputs, in priority order:

1. ``DD/MM/YYYY HH:mm``   canonical
2. ``DDMM/YYYY HH:mm``    legacy rows where the first slash was lost
3. ``DD/MM/YYYY``         midnight assumed
4. anything pandas.to_datetime understands (ISO strings and the like)

Parsed values are naive wall-clock datetimes; timezone-aware fallbacks are
converted to UTC first. Unparseable or empty input sorts as timestamp 0.
"""

__all__ = [
    "CANONICAL_FORMAT",
    "parse_contact_date",
    "contact_timestamp",
    "format_contact_date",
    "format_contact_date_for_input",
]

CANONICAL_FORMAT = "%d/%m/%Y %H:%M"
PLACEHOLDER = "—"

_DATE_TIME = re.compile(r"^(\d{2})/(\d{2})/(\d{4}) (\d{2}):(\d{2})$")
_LEGACY_DATE_TIME = re.compile(r"^(\d{2})(\d{2})/(\d{4}) (\d{2}):(\d{2})$")
_DATE_ONLY = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

_EPOCH = datetime(1970, 1, 1)


def _parse_generic(text: str) -> datetime | None:
    with warnings.catch_warnings():
        # dayfirst inference warnings; the explicit patterns above handle DD/MM
        warnings.simplefilter("ignore", UserWarning)
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (ValueError, OverflowError, TypeError):
            return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def parse_contact_date(text: str | None) -> datetime | None:
    if not text:
        return None
    text = text.strip()
    for pattern in (_DATE_TIME, _LEGACY_DATE_TIME, _DATE_ONLY):
        match = pattern.match(text)
        if match is None:
            continue
        day, month, year, *clock = match.groups()
        hour, minute = clock if clock else ("00", "00")
        try:
            return datetime(int(year), int(month), int(day), int(hour), int(minute))
        except ValueError:
            # 31/02/2024 and friends: matched the shape, not a calendar date
            return None
    return _parse_generic(text)


def contact_timestamp(text: str | None) -> float:
    """Seconds since 1970-01-01 (wall clock) for sorting; 0 when unparseable."""
    parsed = parse_contact_date(text)
    if parsed is None:
        return 0.0
    return (parsed - _EPOCH).total_seconds()


def format_contact_date(text: str | None) -> str:
    """Render for the table: canonical format, raw text when unparseable."""
    if not text:
        return PLACEHOLDER
    parsed = parse_contact_date(text)
    if parsed is None:
        return text
    return parsed.strftime(CANONICAL_FORMAT)


def format_contact_date_for_input(text: str | None) -> str:
    """Canonical editable string, "" when the value cannot be parsed."""
    parsed = parse_contact_date(text)
    if parsed is None:
        return ""
    return parsed.strftime(CANONICAL_FORMAT)
