from __future__ import annotations

from dataclasses import dataclass

"""Transient, dismissable notification shown after a workflow operation."""

__all__ = [
    "Notice",
]

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    kind: str  # success / error
    message: str

    @staticmethod
    def success(message: str) -> Notice:
        return Notice(kind=SUCCESS, message=message)

    @staticmethod
    def error(message: str) -> Notice:
        return Notice(kind=ERROR, message=message)

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR
