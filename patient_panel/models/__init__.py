"""Domain models for the patient panel.

Plain dataclasses shared by the sheet client, the record view model, the edit
workflow and the web layer.
"""

from .column_roles import ROLE_ABSENT, ColumnRoles
from .config_models import AuthConfig, PanelConfig, SheetSourceConfig, UiConfig
from .entry import Entry
from .error_record import ErrorRecord
from .notice import Notice
from .page_result import PageResult

__all__ = [
    # Configuration models
    "AuthConfig",
    "PanelConfig",
    "SheetSourceConfig",
    "UiConfig",
    # Record models
    "ColumnRoles",
    "Entry",
    "PageResult",
    "ROLE_ABSENT",
    # Feedback / error models
    "ErrorRecord",
    "Notice",
]
