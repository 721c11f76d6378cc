"""Request parameters from every source, with explicit precedence.

A request carries four parameter sources. ``RequestParameters`` keeps them
as an ordered list of named mappings, lowest precedence first::

    query < body < files < route

so a route parameter always wins over a query-string value of the same
name. Lookups ignore case.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from wren._internal.paths import deep_merge

SOURCES: tuple[str, ...] = ("query", "body", "files", "route")


def lookup(mapping: Mapping[str, Any], key: str) -> tuple[bool, Any]:
    """Case-insensitive ``(found, value)`` lookup in one mapping."""
    if key in mapping:
        return True, mapping[key]
    folded = key.lower()
    for candidate, value in mapping.items():
        if str(candidate).lower() == folded:
            return True, value
    return False, None


class RequestParameters(Mapping[str, Any]):
    """Merged, read-only view over the request's parameter sources.

    Usage::

        params = request.params
        params["id"]                      # highest-precedence source wins
        params.get("page", 1, "query")    # only look at the query string
        params.merged("query", "route")   # nested merge of chosen sources
    """

    __slots__ = ("_merged", "_sources")

    def __init__(self, **sources: Mapping[str, Any]) -> None:
        unknown = set(sources) - set(SOURCES)
        if unknown:
            msg = f"Unknown parameter source(s): {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        self._sources: dict[str, Mapping[str, Any]] = {name: sources.get(name) or {} for name in SOURCES}
        self._merged = deep_merge({}, *self._sources.values())

    def source(self, name: str) -> Mapping[str, Any]:
        """One source by name (``query``, ``body``, ``files`` or ``route``)."""
        return self._sources[name]

    def merged(self, *names: str) -> dict[str, Any]:
        """Recursive merge of the named sources in precedence order."""
        chosen = [name for name in SOURCES if name in names] if names else list(SOURCES)
        return deep_merge({}, *(self._sources[name] for name in chosen))

    def get(self, key: str, default: Any = None, *names: str) -> Any:  # type: ignore[override]
        """First hit for ``key`` scanning sources from highest precedence down."""
        chosen = names or SOURCES
        for name in reversed(SOURCES):
            if name not in chosen:
                continue
            found, value = lookup(self._sources[name], key)
            if found:
                return value
        return default

    def __getitem__(self, key: str) -> Any:
        found, value = lookup(self._merged, key)
        if not found:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and lookup(self._merged, key)[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._merged)

    def __len__(self) -> int:
        return len(self._merged)

    def __repr__(self) -> str:
        return f"RequestParameters({self._merged!r})"
