"""
Admin auth provider and sign-in state machine tests.
Run with: pytest tests/test_session.py -v
"""

import os
import warnings
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from folio.core.database import MemoryDocumentStore
from folio.core.errors import AuthError, ConfigurationError, ValidationError
from folio.modules.dashboard import (
    AdminRegistry, AdminSession, AdminTableAuth, AuthProvider, FirebaseAuth, SessionState,
)
from folio.modules.projects import ProjectsStore
from folio.modules.settings import SettingsStore


class StubProvider(AuthProvider):
    name = 'stub'

    def __init__(self, result=None, error=None):
        self.result = result or {'uid': '1', 'email': 'admin@example.com'}
        self.error = error
        self.calls = []

    def sign_in(self, email, password):
        self.calls.append((email, password))
        if self.error is not None:
            raise self.error
        return dict(self.result, email=email)


# ---------------------------------------------------------------------------
# AdminTableAuth
# ---------------------------------------------------------------------------

@pytest.fixture
def table_auth(tmp_db_dir):
    return AdminTableAuth(os.path.join(tmp_db_dir, "users.db"))


def test_create_and_sign_in(table_auth):
    table_auth.create_admin(" Admin@Example.com ", "hunter22")

    assert table_auth.admin_count() == 1
    user = table_auth.sign_in("admin@example.com", "hunter22")
    assert user == {"uid": "1", "email": "admin@example.com"}


def test_wrong_password_and_unknown_email(table_auth):
    table_auth.create_admin("admin@example.com", "hunter22")

    with pytest.raises(AuthError, match="Invalid email or password"):
        table_auth.sign_in("admin@example.com", "wrong-password")
    with pytest.raises(AuthError, match="Invalid email or password"):
        table_auth.sign_in("nobody@example.com", "hunter22")


@pytest.mark.parametrize("email, password, message", [
    ("", "hunter22", "required"),
    ("admin@example.com", "", "required"),
    ("admin@example.com", "short", "at least 6 characters"),
])
def test_create_admin_validation(table_auth, email, password, message):
    with pytest.raises(ValidationError, match=message):
        table_auth.create_admin(email, password)
    assert table_auth.admin_count() == 0


def test_duplicate_admin_rejected(table_auth):
    table_auth.create_admin("admin@example.com", "hunter22")

    with pytest.raises(ValidationError, match="already exists"):
        table_auth.create_admin("ADMIN@example.com", "another-one")


# ---------------------------------------------------------------------------
# FirebaseAuth
# ---------------------------------------------------------------------------

def _response(status_code, payload):
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.json.return_value = payload
    return response


def test_firebase_auth_requires_api_key():
    with pytest.raises(ConfigurationError):
        FirebaseAuth(None).sign_in("admin@example.com", "pw")


@patch("folio.modules.dashboard.auth.requests.post")
def test_firebase_auth_success(mock_post):
    mock_post.return_value = _response(200, {
        "localId": "uid-42", "email": "admin@example.com", "idToken": "tok",
    })

    user = FirebaseAuth("api-key").sign_in("admin@example.com", "pw")

    assert user == {"uid": "uid-42", "email": "admin@example.com", "id_token": "tok"}
    args, kwargs = mock_post.call_args
    assert args[0] == FirebaseAuth.SIGN_IN_URL
    assert kwargs["params"] == {"key": "api-key"}
    assert kwargs["json"]["returnSecureToken"] is True


@pytest.mark.parametrize("code, message", [
    ("INVALID_LOGIN_CREDENTIALS", "Invalid email or password"),
    ("EMAIL_NOT_FOUND", "Invalid email or password"),
    ("TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled", "Too many attempts"),
    ("SOMETHING_NEW", "Sign-in was rejected"),
])
@patch("folio.modules.dashboard.auth.requests.post")
def test_firebase_auth_error_codes(mock_post, code, message):
    mock_post.return_value = _response(400, {"error": {"message": code}})

    with pytest.raises(AuthError, match=message):
        FirebaseAuth("api-key").sign_in("admin@example.com", "pw")


@patch("folio.modules.dashboard.auth.requests.post")
def test_firebase_auth_network_error(mock_post):
    mock_post.side_effect = requests.exceptions.ConnectionError("down")

    with pytest.raises(AuthError, match="Network error"):
        FirebaseAuth("api-key").sign_in("admin@example.com", "pw")


# ---------------------------------------------------------------------------
# AdminSession
# ---------------------------------------------------------------------------

def test_sign_in_transitions_and_normalizes_email():
    provider = StubProvider()
    session = AdminSession(provider)
    states = []
    session.subscribe(lambda s: states.append(s.state))

    assert session.sign_in("  Admin@Example.COM ", "pw") is True

    assert provider.calls == [("admin@example.com", "pw")]
    assert states == [SessionState.SIGNING_IN, SessionState.SIGNED_IN]
    assert session.is_signed_in
    assert session.email == "admin@example.com"
    assert session.error == ""


@pytest.mark.parametrize("email, password", [("", "pw"), ("admin@example.com", ""), ("   ", "pw")])
def test_blank_credentials_never_reach_provider(email, password):
    provider = StubProvider()
    session = AdminSession(provider)

    assert session.sign_in(email, password) is False
    assert provider.calls == []
    assert session.state is SessionState.SIGNED_OUT
    assert session.error == "Please enter both email and password"


def test_failed_sign_in_reports_provider_message():
    session = AdminSession(StubProvider(error=AuthError("Invalid email or password")))

    assert session.sign_in("admin@example.com", "super-secret") is False
    assert session.state is SessionState.SIGNED_OUT
    assert session.error == "Login failed: Invalid email or password"
    assert "super-secret" not in session.error
    assert session.user is None


def test_configuration_error_is_reported():
    session = AdminSession(StubProvider(error=ConfigurationError("FIREBASE_API_KEY is not configured")))

    assert session.sign_in("admin@example.com", "pw") is False
    assert "FIREBASE_API_KEY" in session.error


def test_unexpected_error_gets_generic_message():
    session = AdminSession(StubProvider(error=RuntimeError("stack details")))

    assert session.sign_in("admin@example.com", "pw") is False
    assert session.error == "Login failed: unexpected error, please try again"


def test_second_sign_in_is_refused():
    provider = StubProvider()
    session = AdminSession(provider)
    session.sign_in("admin@example.com", "pw")

    assert session.sign_in("admin@example.com", "pw") is False
    assert session.error == "Already signed in"
    assert len(provider.calls) == 1


def test_sign_in_while_signing_in_is_refused():
    session = AdminSession(StubProvider())
    results = []

    def reenter(s):
        if s.state is SessionState.SIGNING_IN and not results:
            results.append(s.sign_in("admin@example.com", "pw"))

    session.subscribe(reenter)
    assert session.sign_in("admin@example.com", "pw") is True
    assert results == [False]


def test_sign_out_and_expire():
    session = AdminSession(StubProvider())
    assert session.sign_out() is False

    session.sign_in("admin@example.com", "pw")
    assert session.sign_out() is True
    assert session.state is SessionState.SIGNED_OUT
    assert session.user is None

    session.sign_in("admin@example.com", "pw")
    session.expire()
    assert session.state is SessionState.SIGNED_OUT
    assert "expired" in session.error


def test_session_module_compiles_without_warnings():
    from folio.modules.dashboard import session as session_module

    with open(session_module.__file__, encoding="utf-8") as f:
        source = f.read()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(source, session_module.__file__, "exec")


def test_unsubscribed_observer_is_not_called():
    session = AdminSession(StubProvider())
    states = []
    subscription = session.subscribe(lambda s: states.append(s.state))
    subscription.close()

    session.sign_in("admin@example.com", "pw")
    assert states == []


# ---------------------------------------------------------------------------
# AdminRegistry
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_folio():
    document_store = MemoryDocumentStore()
    return SimpleNamespace(
        auth_provider=StubProvider(),
        document_store=document_store,
        settings_store=SettingsStore(document_store),
        projects_store=ProjectsStore(document_store),
        uploader=None,
        settings_path="settings",
        projects_path="projects",
    )


def test_editor_only_exists_while_signed_in(fake_folio):
    registry = AdminRegistry(fake_folio)
    token, entry = registry.create()

    assert registry.get(token) is entry
    assert entry.get_editor() is None

    entry.session.sign_in("admin@example.com", "pw")
    editor = entry.get_editor()
    assert editor is not None
    assert entry.get_editor() is editor

    entry.session.sign_out()
    assert editor.closed
    assert entry.get_editor() is None


def test_discard_signs_out_and_forgets_token(fake_folio):
    registry = AdminRegistry(fake_folio)
    token, entry = registry.create()
    entry.session.sign_in("admin@example.com", "pw")
    editor = entry.get_editor()

    registry.discard(token)

    assert registry.get(token) is None
    assert len(registry) == 0
    assert editor.closed
    assert not entry.session.is_signed_in


def test_tokens_are_unique(fake_folio):
    registry = AdminRegistry(fake_folio)
    tokens = {registry.create()[0] for _ in range(5)}

    assert len(tokens) == 5
    assert registry.get(None) is None
