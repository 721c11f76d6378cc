"""Tests for wren.http.cookies — Cookie parsing and Set-Cookie values."""

from wren.http.cookies import SetCookie, parse_cookies, parse_set_cookie


class TestParseCookies:
    def test_pairs(self) -> None:
        assert parse_cookies("a=1; b=two") == {"a": "1", "b": "two"}

    def test_quoted_and_encoded(self) -> None:
        assert parse_cookies('token="a%20b"') == {"token": "a b"}

    def test_empty(self) -> None:
        assert parse_cookies(None) == {}
        assert parse_cookies("garbage") == {}


class TestSetCookie:
    def test_header_value(self) -> None:
        cookie = SetCookie("session", "a b", max_age=60, secure=True)
        assert cookie.to_header_value() == "session=a%20b; Max-Age=60; Path=/; Secure; HttpOnly; SameSite=Lax"

    def test_minimal(self) -> None:
        cookie = SetCookie("k", "v", path="", httponly=False, samesite="")
        assert cookie.to_header_value() == "k=v"

    def test_parse_set_cookie(self) -> None:
        cookie = parse_set_cookie("session=a%20b; Max-Age=0; Path=/admin; HttpOnly; SameSite=Strict")
        assert cookie.name == "session"
        assert cookie.value == "a b"
        assert cookie.max_age == 0
        assert cookie.path == "/admin"
        assert cookie.httponly is True
        assert cookie.samesite == "strict"
