"""Content negotiation — decide which representation a request wants.

Signals are tried in order and the first decisive one wins:

1. the route's ``extension`` parameter (``.json`` -> ``application/json``);
   an unrecognized extension ends the search with ``text/plain``
2. the ``Content-Type`` header, when it names a recognized type
3. the first recognized entry of the ``Accept`` header
4. ``text/plain``
"""

from collections.abc import Mapping

SUPPORTED_TYPES: dict[str, tuple[str, ...]] = {
    "text/plain": (".txt",),
    "text/html": (".html", ".htm"),
    "application/json": (".json",),
    "application/xml": (".xml",),
    "application/pdf": (".pdf",),
}

DEFAULT_TYPE = "text/plain"


def media_type(value: str) -> str:
    """``"text/html; charset=utf-8"`` -> ``"text/html"``."""
    return value.split(";")[0].strip().lower()


def type_for_extension(extension: str) -> str | None:
    extension = extension.lower()
    for content_type, extensions in SUPPORTED_TYPES.items():
        if extension in extensions:
            return content_type
    return None


def from_extension(extension: str | None) -> str | None | bool:
    """Content type for the route extension.

    ``None`` means no signal; ``False`` means an extension was given but
    is not recognized, which stops negotiation.
    """
    if not extension:
        return None
    return type_for_extension(extension) or False


def from_content_type(header: str | None) -> str | None:
    if not header:
        return None
    candidate = media_type(header)
    return candidate if candidate in SUPPORTED_TYPES else None


def from_accept(header: str | None) -> str | None:
    for entry in (header or "").split(","):
        candidate = media_type(entry)
        if candidate in SUPPORTED_TYPES:
            return candidate
    return None


def detect_content_type(extension: str | None, headers: Mapping[str, str]) -> str:
    """Run the detection chain for one request."""
    by_extension = from_extension(extension)
    if by_extension is False:
        return DEFAULT_TYPE
    if by_extension:
        return by_extension
    return (
        from_content_type(headers.get("content-type"))
        or from_accept(headers.get("accept"))
        or DEFAULT_TYPE
    )
