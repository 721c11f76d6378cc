"""Wren exception hierarchy.

Shared across Router, App, the dispatch pipeline and components so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when routes or app configuration are invalid.

    Raised while connecting routes or loading settings, before the first
    request is served. Not recoverable.
    """


class SecurityError(WrenError):
    """An integrity check failed (CSRF token mismatch, expired token).

    Components raising this recover locally instead of letting it reach
    the error boundary.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher, controllers, or components. The error
    boundary catches these and renders the matching error view.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route, controller, or action matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request body could not be parsed."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class PayloadTooLarge(HTTPError):  # noqa: N818
    """413 — the request body exceeds ``max_content_length``."""

    def __init__(self, limit: int) -> None:
        super().__init__(status=413, detail=f"Request body exceeds {limit} bytes")


class UpstreamError(HTTPError):  # noqa: N818
    """A remote API call failed or reported an error status.

    Propagates to the error boundary as a 502. Never retried.
    """

    def __init__(self, detail: str = "Bad Gateway", status: int = 502) -> None:
        super().__init__(status=status, detail=detail)
