"""Form body parsing — URL-encoded and multipart.

URL-encoded bodies use stdlib ``urllib.parse``; multipart bodies use
``python-multipart``. Field names keep their bracket notation
(``tags[]``, ``post[title]``) until ``FormData.nested()`` expands them.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from wren._internal.paths import nest
from wren.errors import BadRequest

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@dataclass(frozen=True, slots=True)
class UploadFile:
    """One uploaded file from a multipart submission, held in memory."""

    field: str
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def save(self, path: str | Path) -> None:
        """Write the file content to ``path``. Parent directories must exist."""
        Path(path).write_bytes(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    ``__getitem__`` returns the first value for a field; ``get_list``
    returns all of them. Uploaded files are kept apart in ``files``.

    Usage::

        form = request.form()
        title = form["title"]
        avatar = form.files.get("avatar")  # UploadFile or None
    """

    __slots__ = ("_fields", "_files")

    def __init__(
        self,
        fields: list[tuple[str, str]] | None = None,
        files: list[UploadFile] | None = None,
    ) -> None:
        self._fields = tuple(fields or ())
        self._files = tuple(files or ())

    @property
    def files(self) -> dict[str, UploadFile]:
        """Uploaded files by field name (last one wins for repeated fields)."""
        return {upload.field: upload for upload in self._files}

    def __getitem__(self, key: str) -> str:
        for name, value in self._fields:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._fields))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._fields))

    def __repr__(self) -> str:
        return f"FormData({list(self._fields)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (checkboxes, multi-selects)."""
        return [value for name, value in self._fields if name == key]

    def nested(self) -> dict[str, Any]:
        """Field values with bracketed names expanded into nested data."""
        return nest(self._fields)

    def nested_files(self) -> dict[str, Any]:
        """Uploads keyed like ``nested()``: one ``UploadFile`` per leaf."""
        return nest((upload.field, upload) for upload in self._files)


def is_form(content_type: str | None) -> bool:
    return (content_type or "").split(";")[0].strip().lower() in FORM_TYPES


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body according to its ``Content-Type``.

    Raises ``BadRequest`` for malformed multipart bodies and ``ValueError``
    when the content type is not a form encoding.
    """
    media_type = content_type.split(";")[0].strip().lower()
    if media_type == "application/x-www-form-urlencoded":
        return FormData(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))
    if media_type == "multipart/form-data":
        return _parse_multipart(body, content_type)
    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type)
    boundary = options.get(b"boundary")
    if not boundary:
        raise BadRequest("Multipart form data missing boundary parameter")

    fields: list[tuple[str, str]] = []
    files: list[UploadFile] = []
    part: dict[str, Any] = {}
    header_name = bytearray()
    header_value = bytearray()

    def on_part_begin() -> None:
        part.clear()
        part.update(name=None, filename=None, content_type="application/octet-stream", data=bytearray())

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        part["data"].extend(chunk[start:end])

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        header_name.extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        header_value.extend(chunk[start:end])

    def on_header_end() -> None:
        name = header_name.decode("latin-1").lower()
        value = bytes(header_value)
        header_name.clear()
        header_value.clear()
        if name == "content-disposition":
            _, params = parse_options_header(value)
            if b"name" in params:
                part["name"] = params[b"name"].decode("utf-8")
            if b"filename" in params:
                part["filename"] = params[b"filename"].decode("utf-8")
        elif name == "content-type":
            part["content_type"] = value.decode("latin-1")

    def on_part_end() -> None:
        if part.get("name") is None:
            return
        data = bytes(part["data"])
        if part["filename"] is not None:
            files.append(UploadFile(part["name"], part["filename"], part["content_type"], data))
        else:
            fields.append((part["name"], data.decode("utf-8", errors="replace")))

    parser = MultipartParser(
        boundary,
        {
            "on_part_begin": on_part_begin,
            "on_part_data": on_part_data,
            "on_part_end": on_part_end,
            "on_header_field": on_header_field,
            "on_header_value": on_header_value,
            "on_header_end": on_header_end,
        },
    )
    try:
        parser.write(body)
        parser.finalize()
    except MultipartParseError as exc:
        raise BadRequest(f"Malformed multipart body: {exc}") from exc
    return FormData(fields, files)
