"""Cookie parsing and Set-Cookie serialization."""

from dataclasses import dataclass
from urllib.parse import quote, unquote


def parse_cookies(header: str | None) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Values are percent-decoded and surrounding quotes dropped. Returns an
    empty dict for empty or missing headers.
    """
    cookies: dict[str, str] = {}
    for pair in (header or "").split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep and key:
            cookies[key.strip()] = unquote(value.strip().strip('"'))
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive attached to a Response.

    ``max_age=0`` expires the cookie immediately.
    """

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    def to_header_value(self) -> str:
        parts = [f"{self.name}={quote(self.value, safe='')}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(parts)


def parse_set_cookie(header: str) -> SetCookie:
    """Parse a ``Set-Cookie`` header value back into a SetCookie."""
    first, *attributes = header.split(";")
    name, _, value = first.strip().partition("=")
    options: dict[str, object] = {"httponly": False, "samesite": ""}
    for attribute in attributes:
        key, sep, raw = attribute.strip().partition("=")
        key = key.lower()
        if key == "max-age" and sep:
            options["max_age"] = int(raw)
        elif key in ("path", "domain", "samesite") and sep:
            options[key] = raw.lower() if key == "samesite" else raw
        elif key in ("secure", "httponly"):
            options[key] = True
    return SetCookie(name=name.strip(), value=unquote(value.strip()), **options)  # type: ignore[arg-type]
