from __future__ import annotations

from dataclasses import dataclass

"""Entry model: one patient record paired with its position in the sheet."""

__all__ = [
    "Entry",
]


@dataclass(frozen=True)
class Entry:
    """A record and its absolute index in the full sheet (header row = 0).

    The absolute index is the addressing key for updates. The backing sheet is
    1-indexed and its first row holds the header, so the sheet row to write is
    always `absolute_index + 1`.
    """
    row: list[str]
    absolute_index: int

    @property
    def row_index(self) -> int:
        return self.absolute_index + 1

    def cell(self, column: int) -> str:
        """Return the cell at `column`, "" for a missing role or short row."""
        if column < 0 or column >= len(self.row):
            return ""
        return self.row[column] or ""
