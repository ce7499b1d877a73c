"""Auth gate: Firebase sign-in, explicit session contexts and the route guard."""

from .firebase import AuthError, AuthUser, FirebaseAuthClient
from .guard import guard_redirect
from .session import SessionContext, SessionRegistry

__all__ = [
    "AuthError",
    "AuthUser",
    "FirebaseAuthClient",
    "SessionContext",
    "SessionRegistry",
    "guard_redirect",
]
