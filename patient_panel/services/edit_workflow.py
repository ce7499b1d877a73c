from __future__ import annotations

import copy
import logging
from dataclasses import dataclass

from ..logging.error_log import ErrorLogBuffer
from ..models.column_roles import ColumnRoles
from ..models.notice import Notice
from ..sheets.client import SheetClient
from ..sheets.errors import SheetClientError
from ..sheets.reader import Sheet, pad_row
from .columns import header_roles
from .dates import format_contact_date_for_input
from .view_model import RecordView, current_status, toggled_status

"""Edit workflow: per-session sheet state, edit buffer and commits.

States of the (single) edit session:

    Idle --open_edit--> Editing --change_field--> Editing
    Editing --discard--> Idle
    Editing --save--> Saving --ok--> Idle
                             --error--> Editing (buffer kept)

toggle_status is a one-field save that skips the buffer entirely.

Rows are committed by absolute index; the sheet row written is index + 1.
On success both the sheet and the snapshot are replaced at that index so the
dirty check baseline follows the saved data. Nothing is retried.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "EditSession",
    "EditStateError",
    "PanelState",
    "RecordNotFoundError",
    "RowBusyError",
]

MSG_LOAD_FAILED = "Erro ao carregar dados"
MSG_SAVE_FAILED = "Erro ao salvar. Tente novamente."
MSG_SAVE_OK = "Registro atualizado com sucesso!"
MSG_TOGGLE_FAILED = "Erro ao atualizar status"
MSG_TOGGLE_OK = "Status atualizado com sucesso!"
MSG_ROW_BUSY = "Este registro ainda está sendo salvo"


class RecordNotFoundError(LookupError):
    """Absolute index does not address a record (header row or out of range)."""


class RowBusyError(RuntimeError):
    """A save or toggle for this row is already in flight."""


class EditStateError(RuntimeError):
    """Operation requires an open edit session."""


@dataclass
class EditSession:
    absolute_index: int
    buffer: list[str]

    @property
    def row_index(self) -> int:
        return self.absolute_index + 1


class PanelState:
    """Sheet, snapshot and edit session of one signed-in user."""

    def __init__(self, error_log: ErrorLogBuffer | None = None) -> None:
        self.error_log = error_log
        self.rows: Sheet = []
        self.snapshot: Sheet = []
        self.roles: ColumnRoles = ColumnRoles()
        self.edit: EditSession | None = None
        self.saving_rows: set[int] = set()
        self.notice: Notice | None = None
        self.loaded = False
        self._view: RecordView | None = None

    # -- sheet ---------------------------------------------------------------

    @property
    def headers(self) -> list[str]:
        return list(self.rows[0]) if self.rows else []

    @property
    def view(self) -> RecordView:
        if self._view is None:
            self._view = RecordView(self.rows)
        return self._view

    def _replace_sheet(self, sheet: Sheet) -> None:
        self.rows = [list(r) for r in sheet]
        self.snapshot = copy.deepcopy(self.rows)
        self.roles = header_roles(self.headers)
        self._view = None

    def load(self, client: SheetClient) -> Notice | None:
        """Reload from the sheet. Any open edit session is dropped."""
        self.edit = None
        try:
            sheet = client.read()
        except SheetClientError as e:
            self._replace_sheet([])
            self.loaded = True
            return self._fail("LOAD", -1, e, MSG_LOAD_FAILED)
        self._replace_sheet(sheet)
        self.loaded = True
        logger.info(f"sheet loaded records={max(len(self.rows) - 1, 0)} columns={len(self.headers)}")
        return None

    def record(self, absolute_index: int) -> list[str]:
        if absolute_index < 1 or absolute_index >= len(self.rows):
            raise RecordNotFoundError(f"no record at index {absolute_index}")
        return self.rows[absolute_index]

    def _commit(self, absolute_index: int, row: list[str]) -> None:
        self.rows = [list(row) if i == absolute_index else r for i, r in enumerate(self.rows)]
        self.snapshot = [list(row) if i == absolute_index else r for i, r in enumerate(self.snapshot)]
        self._view = None

    # -- notices -------------------------------------------------------------

    def pop_notice(self) -> Notice | None:
        notice, self.notice = self.notice, None
        return notice

    def _fail(self, operation: str, row: int, error: SheetClientError, message: str) -> Notice:
        logger.warning(f"{operation.lower()} failed row={row} status={error.status}: {error.message}")
        if self.error_log is not None:
            detail = error.message if error.details is None else f"{error.message} ({error.details})"
            self.error_log.record(operation, row, error.error_type, detail)
            self.error_log.flush()
        self.notice = Notice.error(message)
        return self.notice

    # -- edit session --------------------------------------------------------

    def open_edit(self, absolute_index: int) -> EditSession:
        """Start editing a record, replacing any session already open."""
        row = self.record(absolute_index)
        buffer = pad_row(row, len(self.headers))
        column = self.roles.last_contact
        if self.roles.has_last_contact and buffer[column]:
            formatted = format_contact_date_for_input(buffer[column])
            if formatted:
                buffer[column] = formatted
        self.edit = EditSession(absolute_index=absolute_index, buffer=buffer)
        return self.edit

    def _require_edit(self) -> EditSession:
        if self.edit is None:
            raise EditStateError("no edit session open")
        return self.edit

    def change_field(self, column: int, value: str) -> None:
        session = self._require_edit()
        if column < 0 or column >= len(session.buffer):
            raise IndexError(f"column {column} out of range")
        session.buffer[column] = value

    def discard(self) -> None:
        self.edit = None

    def reset_edit(self) -> None:
        """Put the buffer back to the last loaded / saved values."""
        session = self._require_edit()
        session.buffer = pad_row(self.snapshot[session.absolute_index], len(session.buffer))

    def is_dirty(self) -> bool:
        if self.edit is None:
            return False
        baseline = pad_row(self.snapshot[self.edit.absolute_index], len(self.edit.buffer))
        return baseline != self.edit.buffer

    # -- commits -------------------------------------------------------------

    def is_saving(self, absolute_index: int) -> bool:
        return absolute_index in self.saving_rows

    def _begin_save(self, absolute_index: int) -> None:
        if absolute_index in self.saving_rows:
            raise RowBusyError(MSG_ROW_BUSY)
        self.saving_rows.add(absolute_index)

    def save(self, client: SheetClient) -> Notice:
        session = self._require_edit()
        index = session.absolute_index
        values = list(session.buffer)
        self._begin_save(index)
        try:
            client.update(session.row_index, values)
        except SheetClientError as e:
            return self._fail("SAVE", session.row_index, e, MSG_SAVE_FAILED)
        finally:
            self.saving_rows.discard(index)
        self._commit(index, values)
        self.edit = None
        logger.info(f"row saved row={session.row_index}")
        self.notice = Notice.success(MSG_SAVE_OK)
        return self.notice

    def toggle_status(self, client: SheetClient, absolute_index: int) -> Notice | None:
        """Flip Pendente <-> Atendido on one row. No-op without a status column."""
        if not self.roles.has_status:
            return None
        row = self.record(absolute_index)
        status_index = self.roles.status
        updated = pad_row(row, status_index + 1)
        updated[status_index] = toggled_status(current_status(row, status_index))
        self._begin_save(absolute_index)
        try:
            client.update(absolute_index + 1, updated)
        except SheetClientError as e:
            return self._fail("TOGGLE_STATUS", absolute_index + 1, e, MSG_TOGGLE_FAILED)
        finally:
            self.saving_rows.discard(absolute_index)
        self._commit(absolute_index, updated)
        # an open form on this row must not write the old status back
        if self.edit is not None and self.edit.absolute_index == absolute_index:
            if status_index < len(self.edit.buffer):
                self.edit.buffer[status_index] = updated[status_index]
        logger.info(f"status toggled row={absolute_index + 1} status={updated[status_index]}")
        self.notice = Notice.success(MSG_TOGGLE_OK)
        return self.notice

    def reset(self) -> None:
        """Drop everything tied to the session (sign-out)."""
        self.rows = []
        self.snapshot = []
        self.roles = ColumnRoles()
        self.edit = None
        self.saving_rows.clear()
        self.notice = None
        self.loaded = False
        self._view = None
