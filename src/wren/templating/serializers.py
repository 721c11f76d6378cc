"""View-data serializers for the JSON and XML render paths."""

import json
import re
from collections.abc import Mapping
from typing import Any
from xml.etree import ElementTree

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
_NOT_NAME_CHAR = re.compile(r"[^\w.-]")


def to_json(view: Mapping[str, Any]) -> str:
    """Pretty-printed JSON, four-space indent, non-ASCII kept as is."""
    return json.dumps(view, indent=4, ensure_ascii=False, default=str)


def _tag(key: Any) -> str:
    """An XML element name for ``key``: ``"my key"`` -> ``my_key``, ``"1a"`` -> ``item_1a``."""
    name = _NOT_NAME_CHAR.sub("_", str(key))
    return name if name[:1].isalpha() or name[:1] == "_" else f"item_{name}"


def _fill(element: ElementTree.Element, value: Any) -> None:
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, list | tuple):
        items = enumerate(value)
    else:
        if value is None:
            return
        if isinstance(value, bool):
            element.text = "1" if value else "0"
        else:
            element.text = str(value)
        return
    for key, item in items:
        _fill(ElementTree.SubElement(element, _tag(key)), item)


def to_xml(view: Mapping[str, Any], root: str = "root") -> str:
    """Serialize nested view data under a ``<root>`` element.

    Numeric keys and list positions become ``item_N`` elements::

        to_xml({"records": ["a", "b"]})
        # <root><records><item_0>a</item_0><item_1>b</item_1></records></root>
    """
    element = ElementTree.Element(root)
    _fill(element, view)
    return XML_DECLARATION + ElementTree.tostring(element, encoding="unicode")
