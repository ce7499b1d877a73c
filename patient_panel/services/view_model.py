from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from functools import cached_property

from ..models.column_roles import ROLE_ABSENT, ColumnRoles
from ..models.entry import Entry
from ..models.page_result import PageResult
from ..sheets.reader import Sheet
from .columns import display_headers, header_roles
from .dates import contact_timestamp
from .formatting import format_value

"""Record view model: raw sheet -> filtered, sorted, paginated entries.

Pipeline (always in this order, never on raw sheet order):

    entries (header skipped) -> sort_by_recency -> filter_by_text
        -> filter_by_status -> paginate

Every step is a plain function so it can be tested on its own; RecordView
just wires them together for one sheet and one ViewQuery.
"""

__all__ = [
    "STATUS_PENDING",
    "STATUS_ATTENDED",
    "FILTER_ALL",
    "FILTER_PENDING",
    "FILTER_ATTENDED",
    "STATUS_FILTER_OPTIONS",
    "current_status",
    "is_attended",
    "toggled_status",
    "sheet_entries",
    "sort_by_recency",
    "filter_by_text",
    "filter_by_status",
    "total_pages",
    "paginate",
    "page_window",
    "ViewQuery",
    "RecordView",
]

STATUS_PENDING = "Pendente"
STATUS_ATTENDED = "Atendido"

FILTER_ALL = "all"
FILTER_PENDING = "pendente"
FILTER_ATTENDED = "atendido"

STATUS_FILTER_OPTIONS = (
    (FILTER_ALL, "Todos os status"),
    (FILTER_PENDING, STATUS_PENDING),
    (FILTER_ATTENDED, STATUS_ATTENDED),
)

PAGE_WINDOW = 5


def _cell(row: Sequence[str], column: int) -> str:
    if column == ROLE_ABSENT or column >= len(row):
        return ""
    return row[column] or ""


def current_status(row: Sequence[str], status_index: int) -> str:
    """Raw status label for display; "Pendente" when absent or empty."""
    return _cell(row, status_index) or STATUS_PENDING


def is_attended(status: str | None) -> bool:
    return "atendido" in (status or "").lower()


def toggled_status(status: str | None) -> str:
    return STATUS_PENDING if is_attended(status) else STATUS_ATTENDED


def sheet_entries(sheet: Sheet) -> list[Entry]:
    return [Entry(row=row, absolute_index=i) for i, row in enumerate(sheet) if i != 0]


def sort_by_recency(entries: Sequence[Entry], last_contact_index: int) -> list[Entry]:
    """Most recent last contact first; equal timestamps keep input order."""
    # sorted() stays stable with reverse=True
    return sorted(
        entries,
        key=lambda e: contact_timestamp(e.cell(last_contact_index)),
        reverse=True,
    )


def filter_by_text(entries: Sequence[Entry], term: str | None) -> list[Entry]:
    if not term:
        return list(entries)
    needle = term.lower()
    return [e for e in entries if any(needle in (cell or "").lower() for cell in e.row)]


def filter_by_status(entries: Sequence[Entry], status_filter: str | None, status_index: int) -> list[Entry]:
    """"all" keeps everything, "atendido" keeps Attended, anything else Pending."""
    if not status_filter or status_filter == FILTER_ALL:
        return list(entries)
    want_attended = status_filter == FILTER_ATTENDED
    return [e for e in entries if is_attended(current_status(e.row, status_index)) == want_attended]


def total_pages(count: int, per_page: int) -> int:
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    return max(1, math.ceil(count / per_page))


def paginate(entries: Sequence[Entry], page: int, per_page: int) -> list[Entry]:
    """Slice [(page-1)*per_page, page*per_page); out of range pages are empty."""
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    if page < 1:
        return []
    start = (page - 1) * per_page
    return list(entries[start:start + per_page])


def page_window(current: int, total: int, width: int = PAGE_WINDOW) -> list[int]:
    """Page numbers for the pagination bar: at most `width`, centred on current."""
    if total <= width:
        return list(range(1, total + 1))
    half = width // 2
    if current <= half + 1:
        first = 1
    elif current >= total - half:
        first = total - width + 1
    else:
        first = current - half
    return list(range(first, first + width))


@dataclass
class ViewQuery:
    """Search / filter / pagination state of one dashboard session."""
    search: str = ""
    status_filter: str = FILTER_ALL
    page: int = 1
    per_page: int = 10

    def update(
        self,
        *,
        search: str | None = None,
        status_filter: str | None = None,
        per_page: int | None = None,
        page: int | None = None,
    ) -> None:
        """Apply changes; any change of search, filter or page size resets page to 1."""
        if per_page is not None and per_page < 1:
            raise ValueError(f"per_page must be >= 1, got {per_page}")
        changed = False
        if search is not None and search != self.search:
            self.search = search
            changed = True
        if status_filter is not None and status_filter != self.status_filter:
            self.status_filter = status_filter
            changed = True
        if per_page is not None and per_page != self.per_page:
            self.per_page = per_page
            changed = True
        if changed:
            self.page = 1
        elif page is not None:
            self.page = max(1, page)

    def clear_filters(self) -> None:
        self.update(search="", status_filter=FILTER_ALL)

    @property
    def is_filtered(self) -> bool:
        return bool(self.search) or self.status_filter != FILTER_ALL


class RecordView:
    """Derived, read-only view over one loaded sheet.

    Column roles are computed once per instance, i.e. once per load; build a
    new RecordView whenever the sheet is replaced.
    """

    def __init__(self, sheet: Sheet) -> None:
        self.sheet = sheet
        self.headers: list[str] = list(sheet[0]) if sheet else []
        self.roles: ColumnRoles = header_roles(self.headers)

    @cached_property
    def sorted_entries(self) -> list[Entry]:
        return sort_by_recency(sheet_entries(self.sheet), self.roles.last_contact)

    @cached_property
    def display_columns(self) -> list[int]:
        return display_headers(self.headers, self.roles)

    def filtered(self, query: ViewQuery) -> list[Entry]:
        entries = filter_by_text(self.sorted_entries, query.search)
        return filter_by_status(entries, query.status_filter, self.roles.status)

    def page(self, query: ViewQuery) -> PageResult:
        filtered = self.filtered(query)
        pages = total_pages(len(filtered), query.per_page)
        attended = sum(1 for e in filtered if self.is_attended(e))
        return PageResult(
            entries=paginate(filtered, query.page, query.per_page),
            current_page=query.page,
            total_pages=pages,
            total_count=len(filtered),
            pending_count=len(filtered) - attended,
            attended_count=attended,
            page_numbers=page_window(query.page, pages),
        )

    def status_of(self, entry: Entry) -> str:
        return current_status(entry.row, self.roles.status)

    def is_attended(self, entry: Entry) -> bool:
        return is_attended(self.status_of(entry))

    def header_label(self, column: int) -> str:
        return self.headers[column] if 0 <= column < len(self.headers) else ""

    def format_cell(self, entry: Entry, column: int) -> str:
        return format_value(
            self.header_label(column),
            entry.cell(column),
            is_last_contact=column == self.roles.last_contact,
        )
