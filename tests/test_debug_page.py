"""Tests for the self-contained debug error page renderer."""

import base64

from wren.http.headers import Headers
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.server.debug_page import _frames, _is_app_frame, render_debug_page, render_debug_text


def _make_request() -> Request:
    return Request(
        method="POST",
        path="/acme/present",
        headers=Headers.from_mapping(
            {
                "authorization": "Basic " + base64.b64encode(b"user:secret").decode(),
                "x-trace": "<abc>",
            }
        ),
        query=QueryParams("debug=1"),
    ).with_route({"controller": "acme", "action": "present", "prefix": None})


def _raise() -> Exception:
    try:
        try:
            int("nope")
        except ValueError as inner:
            msg = "wrapped <error>"
            raise RuntimeError(msg) from inner
    except RuntimeError as exc:
        return exc
    raise AssertionError


class TestFrames:
    def test_extracts_context(self) -> None:
        exc = _raise()
        frames = _frames(exc.__traceback__)
        assert frames[-1]["function"] == "_raise"
        assert any(number == frames[-1]["lineno"] for number, _ in frames[-1]["context"])

    def test_app_frame_detection(self) -> None:
        assert _is_app_frame(__file__)
        assert not _is_app_frame("/usr/lib/python3/site-packages/httpx/_client.py")
        assert not _is_app_frame("<frozen importlib._bootstrap>")


class TestRenderDebugPage:
    def test_page_content(self) -> None:
        page = render_debug_page(_raise(), _make_request())
        assert "builtins.RuntimeError" in page
        assert "wrapped &lt;error&gt;" in page
        assert "Caused by <b>ValueError</b>" in page
        assert "/acme/present?debug=1" in page
        assert "controller=acme, action=present" in page

    def test_masks_sensitive_headers(self) -> None:
        page = render_debug_page(_raise(), _make_request())
        assert base64.b64encode(b"user:secret").decode() not in page
        assert "&lt;abc&gt;" in page

    def test_text_variant(self) -> None:
        text = render_debug_text(_raise(), _make_request())
        assert text.startswith("RuntimeError: wrapped <error>")
        assert "POST /acme/present?debug=1" in text
        assert "ValueError" in text
