from __future__ import annotations

import re

from .dates import PLACEHOLDER, format_contact_date

"""Display formatting keyed by header text."""

__all__ = [
    "PLACEHOLDER",
    "format_phone",
    "format_cpf",
    "format_value",
    "input_type",
]

_NON_DIGIT = re.compile(r"\D")


def _digits(raw: str | None) -> str:
    return _NON_DIGIT.sub("", raw or "")


def format_phone(raw: str | None) -> str:
    digits = _digits(raw)
    if not digits:
        return PLACEHOLDER
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"


def format_cpf(raw: str | None) -> str:
    digits = _digits(raw)
    if len(digits) != 11:
        return raw or PLACEHOLDER
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_value(label: str, value: str | None, *, is_last_contact: bool = False) -> str:
    """Format one cell for the table.

    `label` is the header text; `is_last_contact` marks the column holding the
    last-contact role (decided by index by the caller, since the header text of
    that column need not be unique).
    """
    if not value:
        return PLACEHOLDER
    normalized = (label or "").lower()
    if "telefone" in normalized:
        return format_phone(value)
    if "cpf" in normalized:
        return format_cpf(value)
    if is_last_contact:
        return format_contact_date(value)
    return value


def input_type(label: str) -> str:
    normalized = (label or "").lower()
    if "email" in normalized:
        return "email"
    if "telefone" in normalized:
        return "tel"
    return "text"
