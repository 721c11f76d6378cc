"""Async test client for wren applications.

Uses the same Response type as production. Requests go through the ASGI
interface directly, no HTTP involved, and cookies set by the app are
sent back on later requests like a browser would.
"""

import base64
import inspect
import json as json_module
from typing import Any
from urllib.parse import urlencode

from wren.app import App
from wren.http.cookies import SetCookie, parse_set_cookie
from wren.http.response import Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for wren applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200
    """

    __slots__ = ("app", "client", "cookies")

    def __init__(self, app: App, *, client: tuple[str, int] = ("127.0.0.1", 0)) -> None:
        self.app = app
        self.client = client
        self.cookies: dict[str, str] = {}

    async def __aenter__(self) -> "TestClient":
        self.app.freeze()
        for hook in self.app._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result
        return self

    async def __aexit__(self, *args: object) -> None:
        for hook in self.app._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
        form: dict[str, Any] | None = None,
    ) -> Response:
        """Send a POST request with a raw, JSON or urlencoded form body."""
        extra_headers: dict[str, str] = {}
        request_body = body or b""

        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"
        elif form is not None:
            request_body = urlencode(form, doseq=True).encode("utf-8")
            extra_headers["content-type"] = "application/x-www-form-urlencoded"

        merged = {**extra_headers, **(headers or {})}
        return await self.request("POST", path, headers=merged, body=request_body)

    @staticmethod
    def basic_auth(username: str, password: str) -> dict[str, str]:
        """An ``Authorization`` header for HTTP Basic credentials."""
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        return {"authorization": f"Basic {token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        path_part, _, query_string = path.partition("?")

        raw_headers: list[tuple[bytes, bytes]] = []
        for name, value in (headers or {}).items():
            raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
        if self.cookies:
            cookie_header = "; ".join(
                SetCookie(name, value).to_header_value().split(";")[0] for name, value in self.cookies.items()
            )
            raw_headers.append((b"cookie", cookie_header.encode("latin-1")))

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part or "/",
            "raw_path": (path_part or "/").encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": self.client,
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        response = Response()
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                response.set_status(message["status"])
                for name_b, value_b in message.get("headers", []):
                    name = name_b.decode("latin-1")
                    value = value_b.decode("latin-1")
                    if name == "set-cookie":
                        response.cookies.append(parse_set_cookie(value))
                    else:
                        response.set_header(name, value)
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        response.set_body(b"".join(body_parts))
        self._store_cookies(response)
        return response

    def _store_cookies(self, response: Response) -> None:
        for cookie in response.cookies:
            if cookie.max_age == 0:
                self.cookies.pop(cookie.name, None)
            else:
                self.cookies[cookie.name] = cookie.value
