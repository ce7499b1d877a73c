from __future__ import annotations

import re

"""Route guard: decides redirects from the path and session token presence.

- no token on "/" or "/dashboard..."  -> /login
- token on "/login..."                -> /dashboard
- static assets and images are never guarded
"""

__all__ = [
    "LOGIN_PATH",
    "DASHBOARD_PATH",
    "guard_redirect",
    "is_protected",
    "is_auth_page",
]

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"

_UNGUARDED = re.compile(r"^/(static/|favicon\.ico$)|\.(svg|png|jpg|jpeg|gif|webp)$")


def is_unguarded(path: str) -> bool:
    return _UNGUARDED.search(path) is not None


def is_protected(path: str) -> bool:
    return path == "/" or path.startswith(DASHBOARD_PATH)


def is_auth_page(path: str) -> bool:
    return path.startswith(LOGIN_PATH)


def guard_redirect(path: str, token: str | None) -> str | None:
    """Target path to redirect to, or None to let the request through."""
    if is_unguarded(path):
        return None
    if not token and is_protected(path):
        return LOGIN_PATH
    if token and is_auth_page(path):
        return DASHBOARD_PATH
    return None
