"""Immutable HTTP request.

Frozen metadata plus the fully-read body. The request is built on the
event loop, then handed to the synchronous dispatch pipeline, so every
accessor here is a plain (non-async) call.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Receive, Scope, read_body
from wren.errors import BadRequest
from wren.http.cookies import parse_cookies
from wren.http.forms import FormData, is_form, parse_form_data
from wren.http.headers import Headers
from wren.http.params import RequestParameters
from wren.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``route_params`` is empty until the router has matched; the dispatcher
    then derives a copy with ``with_route``. ``session`` is the mutable
    per-request session dict loaded from (and saved back to) the session
    cookie.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    route_params: Mapping[str, Any] = field(default_factory=dict)
    session: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # Private: parsed body cache (dict contents stay mutable on a frozen instance)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    @property
    def client_address(self) -> str | None:
        return self.client[0] if self.client else None

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_post(self) -> bool:
        return self.method == "POST"

    @property
    def is_ajax(self) -> bool:
        """True for ``X-Requested-With: XMLHttpRequest`` requests."""
        return self.headers.get("x-requested-with", "").lower() == "xmlhttprequest"

    def is_(self, kind: str) -> bool:
        """Check the request against ``"ajax"`` or an HTTP method name."""
        kind = kind.lower()
        if kind == "ajax":
            return self.is_ajax
        return self.method.lower() == kind

    def is_all(self, *kinds: str) -> bool:
        return all(self.is_(kind) for kind in kinds)

    @property
    def basic_auth(self) -> tuple[str, str] | None:
        """``(username, password)`` from an ``Authorization: Basic`` header."""
        scheme, _, credentials = self.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "basic" or not credentials:
            return None
        try:
            decoded = base64.b64decode(credentials.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None
        username, sep, password = decoded.partition(":")
        if not sep:
            return None
        return username, password

    # -- Route accessors --

    def route_param(self, name: str) -> Any:
        return self.route_params.get(name)

    @property
    def plugin(self) -> str | None:
        return self.route_param("plugin")

    @property
    def controller(self) -> str | None:
        return self.route_param("controller")

    @property
    def prefix(self) -> str | None:
        return self.route_param("prefix")

    @property
    def action(self) -> str | None:
        return self.route_param("action")

    @property
    def extension(self) -> str | None:
        return self.route_param("extension")

    # -- Body access --

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self, *, strict: bool = True) -> Any:
        """Parse the body as JSON. An empty body is ``None``.

        Invalid JSON raises ``BadRequest``, or yields ``None`` when
        ``strict`` is false.
        """
        if not self.body.strip():
            return None
        try:
            return json_module.loads(self.body)
        except ValueError as exc:
            if not strict:
                return None
            raise BadRequest(f"Invalid JSON body: {exc}") from exc

    def form(self) -> FormData:
        """Parse the body as form data; empty for non-form content types."""
        if "form" not in self._cache:
            if is_form(self.content_type):
                self._cache["form"] = parse_form_data(self.body, self.content_type or "")
            else:
                self._cache["form"] = FormData()
        return self._cache["form"]

    @property
    def params(self) -> RequestParameters:
        """Query, body, upload and route parameters, route highest."""
        if "params" not in self._cache:
            form = self.form()
            self._cache["params"] = RequestParameters(
                query=self.query.nested(),
                body=form.nested(),
                files=form.nested_files(),
                route={key: value for key, value in self.route_params.items() if value is not None},
            )
        return self._cache["params"]

    # -- Factories --

    def with_route(self, params: Mapping[str, Any]) -> Request:
        """Copy of this request carrying the matched route parameters."""
        cache = {key: value for key, value in self._cache.items() if key != "params"}
        return dataclasses.replace(self, route_params=dict(params), _cache=cache)

    @classmethod
    async def from_asgi(cls, scope: Scope, receive: Receive, *, max_body: int | None = None) -> Request:
        """Create a Request from an ASGI scope, reading the whole body.

        Raises ``PayloadTooLarge`` once the body exceeds ``max_body``.
        """
        return cls.from_scope(scope, body=await read_body(receive, max_body))

    @classmethod
    def from_scope(cls, scope: Scope, *, body: bytes = b"") -> Request:
        """Create a Request from scope metadata and an already-read body."""
        headers = Headers(scope.get("headers", ()))
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie")),
            body=body,
        )
