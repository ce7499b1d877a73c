from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.column_roles import ROLE_ABSENT, ColumnRoles

"""Column roles inferred from header text.

The sheet has no fixed schema: staff rename and reorder columns freely. The
status, last-contact and CPF columns are therefore found by case-insensitive
substring match of the header text against fixed keyword sets. The first
(lowest index) matching header wins.
"""

__all__ = [
    "STATUS_KEYWORDS",
    "LAST_CONTACT_KEYWORDS",
    "IDENTIFIER_KEYWORDS",
    "column_index",
    "header_roles",
    "display_headers",
]

STATUS_KEYWORDS = ("status", "situação", "retorno")
LAST_CONTACT_KEYWORDS = ("contato", "ultimo", "último", "last contact", "data contato")
IDENTIFIER_KEYWORDS = ("cpf",)

DISPLAY_COLUMN_COUNT = 3


def column_index(headers: Sequence[str], keywords: Iterable[str]) -> int:
    """Index of the first header containing any keyword, -1 when none does."""
    keywords = tuple(keywords)
    for i, header in enumerate(headers):
        label = (header or "").lower()
        if any(k in label for k in keywords):
            return i
    return ROLE_ABSENT


def header_roles(headers: Sequence[str]) -> ColumnRoles:
    return ColumnRoles(
        status=column_index(headers, STATUS_KEYWORDS),
        last_contact=column_index(headers, LAST_CONTACT_KEYWORDS),
        identifier=column_index(headers, IDENTIFIER_KEYWORDS),
    )


def display_headers(headers: Sequence[str], roles: ColumnRoles) -> list[int]:
    """Column indices shown in the table.

    The first three headers that are neither the status nor the CPF column,
    plus the last-contact column appended when it is not already among them.
    Indices rather than labels, so duplicated header text stays unambiguous.
    """
    main = [i for i in range(len(headers)) if i not in (roles.status, roles.identifier)]
    columns = main[:DISPLAY_COLUMN_COUNT]
    if roles.has_last_contact and roles.last_contact not in columns:
        columns.append(roles.last_contact)
    return columns
