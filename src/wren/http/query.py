"""Query string parameters.

Keeps every ``(key, value)`` pair in order so bracketed keys
(``filter[tag][]=a``) can be nested later.
"""

from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import parse_qsl

from wren._internal.paths import nest


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    __slots__ = ("_pairs", "raw")

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        self.raw = query_string
        self._pairs: tuple[tuple[str, str], ...] = tuple(parse_qsl(query_string, keep_blank_values=True))

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"QueryParams({self.raw!r})"

    def get_list(self, key: str) -> list[str]:
        return [value for name, value in self._pairs if name == key]

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def multi_items(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def nested(self) -> dict[str, Any]:
        """Parameters with bracketed keys expanded into nested data."""
        return nest(self._pairs)
