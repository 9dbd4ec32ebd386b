from __future__ import annotations

import pytest

from seminar.auth import AuthGate
from seminar.errors import InvalidCredentials, SessionError
from seminar.security import AdminCredentials, hash_password, verify_password
from seminar.sessions import SessionManager

PASSWORD = "seminar-admin-password"


@pytest.fixture()
def gate() -> AuthGate:
    return AuthGate(AdminCredentials("admin", password=PASSWORD), SessionManager())


def test_hash_and_verify_password() -> None:
    hashed = hash_password(PASSWORD)

    assert hashed != PASSWORD
    assert verify_password(PASSWORD, hashed)
    assert not verify_password("incorrect", hashed)
    assert not verify_password(PASSWORD, "not-a-hash")
    assert not verify_password(PASSWORD, "")


def test_empty_password_cannot_be_hashed() -> None:
    with pytest.raises(ValueError):
        hash_password("")


def test_plain_credentials() -> None:
    credentials = AdminCredentials("admin", password=PASSWORD)

    assert credentials.verify("admin", PASSWORD)
    assert not credentials.verify("admin", "wrong")
    assert not credentials.verify("Admin", PASSWORD)


def test_hashed_credentials_take_precedence() -> None:
    credentials = AdminCredentials(
        "admin", password="ignored", password_hash=hash_password(PASSWORD)
    )

    assert credentials.verify("admin", PASSWORD)
    assert not credentials.verify("admin", "ignored")


def test_unconfigured_credentials_reject_everything() -> None:
    credentials = AdminCredentials("admin")

    assert not credentials.configured
    assert not credentials.verify("admin", "")
    assert not credentials.verify("admin", "anything")


def test_login_transitions_to_authenticated(gate: AuthGate) -> None:
    assert not gate.is_authenticated(None)

    token = gate.login(None, "admin", PASSWORD)

    state = gate.status(token)
    assert state.is_authenticated
    assert state.username == "admin"


def test_failed_login_leaves_session_unchanged(gate: AuthGate) -> None:
    token = gate.login(None, "admin", PASSWORD)

    with pytest.raises(InvalidCredentials):
        gate.login(token, "admin", "wrong")

    assert gate.is_authenticated(token)


def test_relogin_replaces_previous_session(gate: AuthGate) -> None:
    first = gate.login(None, "admin", PASSWORD)
    second = gate.login(first, "admin", PASSWORD)

    assert first != second
    assert not gate.is_authenticated(first)
    assert gate.is_authenticated(second)


def test_logout_returns_to_anonymous(gate: AuthGate) -> None:
    token = gate.login(None, "admin", PASSWORD)

    gate.logout(token)

    state = gate.status(token)
    assert not state.is_authenticated
    assert state.username is None
    gate.logout(None)


def test_logout_wraps_session_failures() -> None:
    class BrokenSessions(SessionManager):
        def destroy(self, token):
            raise RuntimeError("store offline")

    gate = AuthGate(AdminCredentials("admin", password=PASSWORD), BrokenSessions())
    token = gate.sessions.create(gate.status(None))

    with pytest.raises(SessionError):
        gate.logout(token)
