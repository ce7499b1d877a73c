from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from patient_panel.auth.firebase import (
    INTERNAL_ERROR,
    INVALID_CREDENTIAL,
    LOGIN_MESSAGES,
    MISSING_FIELDS,
    SIGN_IN_URL,
    TOO_MANY_REQUESTS,
    AuthError,
    AuthUser,
    FirebaseAuthClient,
)
from patient_panel.auth.guard import guard_redirect, is_protected
from patient_panel.auth.session import SessionRegistry


def _response(ok: bool, payload: dict, status: int = 200) -> MagicMock:
    res = MagicMock()
    res.ok = ok
    res.status_code = status
    res.json.return_value = payload
    return res


def test_sign_in_success():
    session = MagicMock()
    session.post.return_value = _response(
        True,
        {"localId": "u1", "email": "a@b.com", "idToken": "tok", "refreshToken": "ref", "expiresIn": "3600"},
    )
    client = FirebaseAuthClient("api-key", session=session, timeout=5)
    user = client.sign_in(" a@b.com ", "pw")
    assert user == AuthUser(uid="u1", email="a@b.com", id_token="tok", refresh_token="ref", expires_in=3600)
    args, kwargs = session.post.call_args
    assert args[0] == SIGN_IN_URL
    assert kwargs["params"] == {"key": "api-key"}
    assert kwargs["json"] == {"email": "a@b.com", "password": "pw", "returnSecureToken": True}
    assert kwargs["timeout"] == 5


@pytest.mark.parametrize("email,password", [("", "pw"), ("a@b.com", ""), ("   ", "pw")])
def test_sign_in_missing_fields(email, password):
    session = MagicMock()
    with pytest.raises(AuthError) as e:
        FirebaseAuthClient("api-key", session=session).sign_in(email, password)
    assert e.value.code == MISSING_FIELDS
    assert e.value.user_message == "Por favor, preencha todos os campos."
    session.post.assert_not_called()


@pytest.mark.parametrize(
    "provider_message,code",
    [
        ("INVALID_LOGIN_CREDENTIALS", INVALID_CREDENTIAL),
        ("EMAIL_NOT_FOUND", INVALID_CREDENTIAL),
        ("TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled", TOO_MANY_REQUESTS),
        ("SOMETHING_NEW", INTERNAL_ERROR),
    ],
)
def test_sign_in_maps_provider_errors(provider_message, code):
    session = MagicMock()
    session.post.return_value = _response(False, {"error": {"code": 400, "message": provider_message}}, 400)
    with pytest.raises(AuthError) as e:
        FirebaseAuthClient("api-key", session=session).sign_in("a@b.com", "pw")
    assert e.value.code == code
    assert e.value.user_message == LOGIN_MESSAGES[code]


def test_sign_in_network_failure():
    session = MagicMock()
    session.post.side_effect = requests.Timeout("slow")
    with pytest.raises(AuthError) as e:
        FirebaseAuthClient("api-key", session=session).sign_in("a@b.com", "pw")
    assert e.value.code == INTERNAL_ERROR
    assert e.value.user_message == "Erro ao fazer login. Tente novamente."


def test_sign_in_without_api_key():
    with pytest.raises(AuthError) as e:
        FirebaseAuthClient(None, session=MagicMock()).sign_in("a@b.com", "pw")
    assert e.value.code == INTERNAL_ERROR


@pytest.mark.parametrize(
    "path,token,expected",
    [
        ("/", None, "/login"),
        ("/dashboard", None, "/login"),
        ("/dashboard/rows/2/edit", None, "/login"),
        ("/login", None, None),
        ("/login", "tok", "/dashboard"),
        ("/dashboard", "tok", None),
        ("/static/panel.css", None, None),
        ("/favicon.ico", None, None),
        ("/logo.png", None, None),
        ("/api/sheets", None, None),
    ],
)
def test_guard_redirect(path, token, expected):
    assert guard_redirect(path, token) == expected


def test_is_protected():
    assert is_protected("/")
    assert is_protected("/dashboard/reload")
    assert not is_protected("/login")


def test_registry_open_get_sign_out(fake_client):
    registry = SessionRegistry(default_page_size=20)
    user = AuthUser(uid="u1", email="a@b.com", id_token="tok")
    context = registry.open(user)
    assert context.token == "tok"
    assert context.query.per_page == 20
    assert registry.get("tok") is context
    assert registry.get(None) is None
    assert len(registry) == 1

    context.state.load(fake_client)
    context.state.open_edit(1)
    context.query.update(search="ana")

    assert registry.sign_out("tok")
    assert registry.get("tok") is None
    assert context.state.rows == []
    assert context.state.edit is None
    assert context.query.search == ""
    assert context.query.per_page == 20
    assert not registry.sign_out("tok")
    assert not registry.sign_out(None)


def test_registry_sign_in_failure_opens_nothing():
    class Rejecting:
        def sign_in(self, email, password):
            raise AuthError(INVALID_CREDENTIAL)

    registry = SessionRegistry()
    with pytest.raises(AuthError):
        registry.sign_in(Rejecting(), "a@b.com", "bad")
    assert len(registry) == 0
