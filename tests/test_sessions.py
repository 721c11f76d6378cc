"""Tests for wren.http.sessions — signed cookie sessions."""

import pytest

from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.http.headers import Headers
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.http.response import Response
from wren.http.sessions import SessionConfig, SessionStore


def request_with(cookies: dict[str, str] | None = None) -> Request:
    return Request(
        method="GET",
        path="/",
        headers=Headers(),
        query=QueryParams(""),
        cookies=cookies or {},
    )


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(SessionConfig(secret_key="test-secret"))


class TestSessionStore:
    def test_requires_secret(self) -> None:
        with pytest.raises(ConfigurationError):
            SessionStore(SessionConfig(secret_key=""))

    def test_missing_cookie(self, store: SessionStore) -> None:
        assert store.load(request_with()) == {}

    def test_round_trip(self, store: SessionStore) -> None:
        response = Response()
        store.save(request_with(), response, {"user": "alice", "visits": 2})
        cookie = response.cookies[0]
        assert cookie.name == "wren_session"
        assert cookie.httponly
        loaded = store.load(request_with({"wren_session": cookie.value}))
        assert loaded == {"user": "alice", "visits": 2}

    def test_tampered_cookie(self, store: SessionStore) -> None:
        response = Response()
        store.save(request_with(), response, {"user": "alice"})
        forged = response.cookies[0].value[:-2] + "xx"
        assert store.load(request_with({"wren_session": forged})) == {}

    def test_other_secret_rejected(self, store: SessionStore) -> None:
        response = Response()
        SessionStore(SessionConfig(secret_key="other")).save(request_with(), response, {"a": 1})
        assert store.load(request_with({"wren_session": response.cookies[0].value})) == {}

    def test_empty_session_expires_cookie(self, store: SessionStore) -> None:
        response = Response()
        store.save(request_with({"wren_session": "old"}), response, {})
        assert response.cookies[0].max_age == 0

    def test_empty_session_without_cookie_sets_nothing(self, store: SessionStore) -> None:
        response = Response()
        store.save(request_with(), response, {})
        assert response.cookies == []


class TestSessionConfig:
    def test_from_app_config(self) -> None:
        config = SessionConfig.from_app_config(
            AppConfig(secret_key="k", session_cookie="sid", session_max_age=60)
        )
        assert config.secret_key == "k"
        assert config.cookie_name == "sid"
        assert config.max_age == 60
