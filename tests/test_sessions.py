from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from storefront.database import Database
from storefront.errors import LoginFailedError
from storefront.schemas import UserCreateRequest
from storefront.sessions import AuthenticationService, SessionManager
from storefront.users import UserService


def test_session_tokens_resolve_until_destroyed() -> None:
    sessions = SessionManager()
    token = sessions.create(7)

    assert sessions.resolve(token) == 7
    assert sessions.resolve("unknown") is None

    sessions.destroy(token)
    assert sessions.resolve(token) is None


def test_expired_sessions_are_dropped(monkeypatch) -> None:
    sessions = SessionManager(ttl=timedelta(minutes=1))
    token = sessions.create(7)

    later = sessions._now() + timedelta(minutes=2)
    monkeypatch.setattr(sessions, "_now", lambda: later)

    assert sessions.resolve(token) is None


def test_session_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError):
        SessionManager(ttl=timedelta(0))


def test_login_issues_token_for_valid_credentials(tmp_path: Path) -> None:
    database = Database(tmp_path / "storefront.sqlite3")
    database.initialize()
    user = UserService(database).create_user(
        UserCreateRequest(email="tester@example.com", name="Tester", password="test")
    )
    sessions = SessionManager()
    authentication = AuthenticationService(database, sessions)

    token = authentication.login(" Tester@Example.com ", "test")
    assert sessions.resolve(token) == user.id

    with pytest.raises(LoginFailedError):
        authentication.login("tester@example.com", "wrong")

    authentication.logout(token)
    assert sessions.resolve(token) is None


def test_creating_a_session_prunes_expired_ones(monkeypatch) -> None:
    sessions = SessionManager(ttl=timedelta(minutes=1))
    stale = sessions.create(7)

    later = sessions._now() + timedelta(minutes=2)
    monkeypatch.setattr(sessions, "_now", lambda: later)
    fresh = sessions.create(8)

    assert list(sessions._sessions) == [fresh]
    assert sessions.resolve(stale) is None
    assert sessions.resolve(fresh) == 8
