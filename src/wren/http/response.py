"""HTTP response built up by the dispatch pipeline.

Controllers and components all work on the same Response for the whole
request, so it is mutable. Setters return the response to allow
chaining::

    response.set_status(401).set_header("WWW-Authenticate", 'Basic realm="x"')
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from wren.http.cookies import SetCookie

# Reserved and already-escaped characters stay as they are.
LOCATION_SAFE = "/?&=%#:;@+,~!$'()*[]"


@dataclass(slots=True)
class Response:
    """Status, header map, body and cookies for one request.

    Header names are case-insensitive: setting ``content-type`` replaces
    an existing ``Content-Type``. ``body`` stays ``None`` until something
    renders or sets it.
    """

    body: str | bytes | None = None
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    cookies: list[SetCookie] = field(default_factory=list)

    # -- Headers --

    def _header_key(self, name: str) -> str | None:
        folded = name.lower()
        for key in self.headers:
            if key.lower() == folded:
                return key
        return None

    def get_header(self, name: str, default: str | None = None) -> str | None:
        key = self._header_key(name)
        return self.headers[key] if key is not None else default

    def set_header(self, name: str, value: Any = None) -> "Response":
        """Set ``name`` to ``value``; ``None`` removes the header."""
        key = self._header_key(name)
        if key is not None:
            del self.headers[key]
        if value is not None:
            self.headers[name] = str(value)
        return self

    def has_header(self, name: str) -> bool:
        return self._header_key(name) is not None

    # -- Status and body --

    def set_status(self, status: int) -> "Response":
        self.status = status
        return self

    def set_body(self, body: str | bytes | None) -> "Response":
        self.body = body
        return self

    def has_body(self) -> bool:
        return self.body is not None

    @property
    def body_bytes(self) -> bytes:
        if self.body is None:
            return b""
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @property
    def text(self) -> str:
        """The body decoded as UTF-8 (for tests and logging)."""
        return self.body_bytes.decode("utf-8", errors="replace")

    # -- Content type --

    @property
    def content_type(self) -> str | None:
        return self.get_header("Content-Type")

    @property
    def media_type(self) -> str | None:
        """``content_type`` without parameters, lower-cased."""
        if self.content_type is None:
            return None
        return self.content_type.split(";")[0].strip().lower()

    def set_content_type(self, content_type: str | None) -> "Response":
        return self.set_header("Content-Type", content_type)

    # -- Redirects --

    @property
    def location(self) -> str | None:
        return self.get_header("Location")

    def has_location(self) -> bool:
        return self.has_header("Location")

    def set_location(self, url: str | None) -> "Response":
        """Set ``Location``; characters a header cannot carry are percent-encoded."""
        if url is not None:
            url = quote(url, safe=LOCATION_SAFE)
        return self.set_header("Location", url)

    # -- Cookies --

    def set_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "lax",
    ) -> "Response":
        """Attach a ``Set-Cookie``, replacing an earlier one with the same name and path."""
        self.cookies = [c for c in self.cookies if (c.name, c.path) != (name, path)]
        self.cookies.append(
            SetCookie(
                name=name,
                value=value,
                max_age=max_age,
                path=path,
                domain=domain,
                secure=secure,
                httponly=httponly,
                samesite=samesite,
            )
        )
        return self

    def delete_cookie(self, name: str, path: str = "/") -> "Response":
        return self.set_cookie(name, "", max_age=0, path=path)
