from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

"""Firebase email/password sign-in over the Identity Toolkit REST API.

Only the sign-in call is remote. Signing out of a password session is purely
local (the panel forgets the token), see auth.session.SessionRegistry.
"""

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

INVALID_CREDENTIAL = "auth/invalid-credential"
TOO_MANY_REQUESTS = "auth/too-many-requests"
MISSING_FIELDS = "auth/missing-fields"
INTERNAL_ERROR = "auth/internal-error"

LOGIN_MESSAGES = {
    INVALID_CREDENTIAL: "Email ou senha incorretos. Verifique suas credenciais.",
    TOO_MANY_REQUESTS: "Muitas tentativas falhas. Tente novamente mais tarde.",
    MISSING_FIELDS: "Por favor, preencha todos os campos.",
    INTERNAL_ERROR: "Erro ao fazer login. Tente novamente.",
}

# Identity Toolkit error.message prefixes
_PROVIDER_CODES = {
    "INVALID_LOGIN_CREDENTIALS": INVALID_CREDENTIAL,
    "INVALID_PASSWORD": INVALID_CREDENTIAL,
    "EMAIL_NOT_FOUND": INVALID_CREDENTIAL,
    "INVALID_EMAIL": INVALID_CREDENTIAL,
    "USER_DISABLED": INVALID_CREDENTIAL,
    "TOO_MANY_ATTEMPTS_TRY_LATER": TOO_MANY_REQUESTS,
}

__all__ = [
    "AuthError",
    "AuthUser",
    "FirebaseAuthClient",
]


class AuthError(Exception):
    def __init__(self, code: str, detail: str | None = None) -> None:
        super().__init__(detail or code)
        self.code = code
        self.detail = detail

    @property
    def user_message(self) -> str:
        return LOGIN_MESSAGES.get(self.code, LOGIN_MESSAGES[INTERNAL_ERROR])


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str
    id_token: str
    refresh_token: str | None = None
    expires_in: int | None = None  # seconds


def _provider_code(payload: Any) -> str:
    try:
        message = payload["error"]["message"]
    except (KeyError, TypeError):
        return ""
    # "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account ..." -> first token
    return str(message).split(" ")[0].split(":")[0]


class FirebaseAuthClient:
    def __init__(self, api_key: str | None, session: requests.Session | None = None, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def sign_in(self, email: str, password: str) -> AuthUser:
        email = (email or "").strip()
        if not email or not password:
            raise AuthError(MISSING_FIELDS)
        if not self.api_key:
            raise AuthError(INTERNAL_ERROR, "FIREBASE_WEB_API_KEY is not configured")
        try:
            res = self.session.post(
                SIGN_IN_URL,
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(INTERNAL_ERROR, str(e)) from e
        try:
            data = res.json()
        except ValueError:
            data = {}
        if not res.ok:
            provider_code = _provider_code(data)
            code = _PROVIDER_CODES.get(provider_code, INTERNAL_ERROR)
            logger.info(f"sign-in rejected email={email} code={provider_code or res.status_code}")
            raise AuthError(code, provider_code or None)
        try:
            user = AuthUser(
                uid=data["localId"],
                email=data.get("email", email),
                id_token=data["idToken"],
                refresh_token=data.get("refreshToken"),
                expires_in=int(data["expiresIn"]) if data.get("expiresIn") else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AuthError(INTERNAL_ERROR, f"unexpected sign-in response: {e}") from e
        logger.info(f"signed in email={user.email}")
        return user
