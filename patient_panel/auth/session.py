from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..logging.error_log import ErrorLogBuffer
from ..services.edit_workflow import PanelState
from ..services.view_model import ViewQuery
from .firebase import AuthUser, FirebaseAuthClient

"""Explicit session context.

A SessionContext is created when a user signs in and torn down when they sign
out. It owns everything loaded on the user's behalf (sheet, snapshot, edit
buffer, list query), so nothing survives a sign-out. The web layer looks the
context up by the session token and passes it down explicitly.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "SessionContext",
    "SessionRegistry",
]


@dataclass
class SessionContext:
    user: AuthUser
    state: PanelState
    query: ViewQuery = field(default_factory=ViewQuery)

    @property
    def token(self) -> str:
        return self.user.id_token

    def teardown(self) -> None:
        self.state.reset()
        self.query = ViewQuery(per_page=self.query.per_page)


class SessionRegistry:
    """token -> SessionContext for the running process (in memory only)."""

    def __init__(self, default_page_size: int = 10, error_log: ErrorLogBuffer | None = None) -> None:
        self.default_page_size = default_page_size
        self.error_log = error_log
        self._contexts: dict[str, SessionContext] = {}

    def __len__(self) -> int:
        return len(self._contexts)

    def open(self, user: AuthUser) -> SessionContext:
        context = SessionContext(
            user=user,
            state=PanelState(error_log=self.error_log),
            query=ViewQuery(per_page=self.default_page_size),
        )
        self._contexts[context.token] = context
        return context

    def sign_in(self, auth_client: FirebaseAuthClient, email: str, password: str) -> SessionContext:
        return self.open(auth_client.sign_in(email, password))

    def get(self, token: str | None) -> SessionContext | None:
        if not token:
            return None
        return self._contexts.get(token)

    def sign_out(self, token: str | None) -> bool:
        context = self._contexts.pop(token, None) if token else None
        if context is None:
            return False
        context.teardown()
        logger.info(f"signed out email={context.user.email}")
        return True
