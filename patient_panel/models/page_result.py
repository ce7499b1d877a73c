from __future__ import annotations

from dataclasses import dataclass, field

from .entry import Entry

"""PageResult model: the visible slice of the filtered patient list.

Carries the counters the dashboard statistics cards show. All counts are taken
over the filtered sequence (after search and status filter), not the raw sheet.
"""

__all__ = [
    "PageResult",
]


@dataclass(frozen=True)
class PageResult:
    entries: list[Entry]  # current page slice
    current_page: int  # 1-based
    total_pages: int  # >= 1
    total_count: int  # filtered entries
    pending_count: int = 0
    attended_count: int = 0
    page_numbers: list[int] = field(default_factory=list)  # pagination buttons

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages
