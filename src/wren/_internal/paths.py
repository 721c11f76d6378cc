"""Nested-parameter helpers.

Request data arrives flat (``post[title]=x`` in a query string, dotted
placeholder names in routes) but is consumed as nested mappings. These
helpers convert between the two shapes and merge them.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

_BRACKETS = re.compile(r"\[([^\]]*)\]")


def flatten(data: Mapping[str, Any], separator: str) -> dict[str, Any]:
    """Flatten nested mappings and lists into ``separator``-joined keys.

    ``{"post": {"id": 3}}`` with ``"___"`` becomes ``{"post___id": 3}``.
    """
    flat: dict[str, Any] = {}

    def walk(prefix: str, value: Any) -> None:
        if isinstance(value, Mapping):
            items: Iterable[tuple[Any, Any]] = value.items()
        elif isinstance(value, list | tuple):
            items = enumerate(value)
        else:
            flat[prefix] = value
            return
        for key, item in items:
            walk(f"{prefix}{separator}{key}" if prefix else str(key), item)

    walk("", data)
    return flat


def split_key(key: str) -> list[str]:
    """Split a bracketed form key: ``a[b][]`` -> ``["a", "b", ""]``."""
    head, bracket, _ = key.partition("[")
    if not bracket or not head:
        return [key]
    return [head, *_BRACKETS.findall(key[len(head) :])]


def nest(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Build nested data from bracketed ``(key, value)`` pairs.

    ``[]`` appends to a list, ``[name]`` descends into a mapping, and a
    repeated plain key collects its values into a list.
    """
    result: dict[str, Any] = {}
    for key, value in pairs:
        parts = split_key(key)
        if len(parts) == 1:
            if key in result:
                existing = result[key]
                result[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
            else:
                result[key] = value
            continue

        node: Any = result
        for part, following in zip(parts, parts[1:], strict=False):
            if isinstance(node, list):
                if part == "" or not part.isdigit() or int(part) >= len(node):
                    node.append([] if following == "" else {})
                    node = node[-1]
                else:
                    node = node[int(part)]
                continue
            child = node.get(part)
            if not isinstance(child, dict | list):
                child = [] if following == "" else {}
                node[part] = child
            node = child

        last = parts[-1]
        if isinstance(node, list):
            node.append(value)
        else:
            node[last] = value
    return result


def deep_merge(base: Mapping[str, Any], *overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge mappings; later values replace earlier ones.

    Nested mappings merge key by key; any other value (lists included)
    replaces the previous one.
    """
    merged: dict[str, Any] = dict(base)
    for override in overrides:
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, Mapping) and isinstance(value, Mapping):
                merged[key] = deep_merge(current, value)
            else:
                merged[key] = value
    return merged


def _drop_private_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return drop_private(value)
    if isinstance(value, list | tuple):
        return [_drop_private_value(item) for item in value]
    return value


def drop_private(data: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively remove keys starting with an underscore.

    Mappings nested inside lists are cleaned too.
    """
    return {key: _drop_private_value(value) for key, value in data.items() if not str(key).startswith("_")}


def build_query(data: Mapping[str, Any]) -> str:
    """Encode ``data`` as a query string using bracket notation.

    ``None`` values are skipped and booleans are written as ``1`` / ``0``.
    """
    pairs: list[tuple[str, str]] = []

    def walk(prefix: str, value: Any) -> None:
        if value is None:
            return
        if isinstance(value, Mapping):
            for key, item in value.items():
                walk(f"{prefix}[{key}]" if prefix else str(key), item)
        elif isinstance(value, list | tuple):
            for index, item in enumerate(value):
                walk(f"{prefix}[{index}]", item)
        elif isinstance(value, bool):
            pairs.append((prefix, "1" if value else "0"))
        else:
            pairs.append((prefix, str(value)))

    walk("", data)
    return urlencode(pairs)
