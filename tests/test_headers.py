"""Tests for wren.http.headers — case-insensitive request headers."""

from wren.http.headers import Headers


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        h = Headers([(b"Content-Type", b"text/html")])
        assert h["content-type"] == "text/html"
        assert h["CONTENT-TYPE"] == "text/html"
        assert "Content-Type" in h

    def test_repeated_headers(self) -> None:
        h = Headers([(b"accept", b"text/html"), (b"accept", b"application/json")])
        assert h["accept"] == "text/html"
        assert h.get_list("Accept") == ["text/html", "application/json"]
        assert len(h) == 1

    def test_missing(self) -> None:
        h = Headers()
        assert h.get("x-missing") is None
        assert 42 not in h

    def test_from_mapping(self) -> None:
        h = Headers.from_mapping({"X-Requested-With": "XMLHttpRequest"})
        assert h["x-requested-with"] == "XMLHttpRequest"
        assert list(h) == ["x-requested-with"]
