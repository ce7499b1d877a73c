"""Core services: record view model and edit workflow."""

from .columns import display_headers, header_roles
from .edit_workflow import EditSession, PanelState, RecordNotFoundError, RowBusyError
from .view_model import RecordView, ViewQuery

__all__ = [
    "EditSession",
    "PanelState",
    "RecordNotFoundError",
    "RecordView",
    "RowBusyError",
    "ViewQuery",
    "display_headers",
    "header_roles",
]
