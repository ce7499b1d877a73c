from __future__ import annotations

from dataclasses import dataclass

"""Column roles derived from header text."""

__all__ = [
    "ColumnRoles",
    "ROLE_ABSENT",
]

ROLE_ABSENT = -1


@dataclass(frozen=True)
class ColumnRoles:
    """Header indices holding each semantic role (-1 when the role is absent)."""
    status: int = ROLE_ABSENT
    last_contact: int = ROLE_ABSENT
    identifier: int = ROLE_ABSENT  # CPF

    @property
    def has_status(self) -> bool:
        return self.status != ROLE_ABSENT

    @property
    def has_last_contact(self) -> bool:
        return self.last_contact != ROLE_ABSENT
