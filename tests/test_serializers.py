"""Tests for wren.templating.serializers — JSON and XML view output."""

import json

from wren.templating.serializers import XML_DECLARATION, to_json, to_xml


class TestToJson:
    def test_four_space_indent(self) -> None:
        assert to_json({"a": {"b": 1}}) == '{\n    "a": {\n        "b": 1\n    }\n}'

    def test_non_ascii_kept(self) -> None:
        assert "é" in to_json({"name": "é"})

    def test_unknown_types_stringified(self) -> None:
        class Thing:
            def __str__(self) -> str:
                return "thing"

        assert json.loads(to_json({"x": Thing()})) == {"x": "thing"}


class TestToXml:
    def test_nested(self) -> None:
        assert to_xml({"records": ["a", "b"]}) == (
            XML_DECLARATION + "<root><records><item_0>a</item_0><item_1>b</item_1></records></root>"
        )

    def test_numeric_keys_and_scalars(self) -> None:
        xml = to_xml({"7": True, "none": None, "n": 3})
        assert "<item_7>1</item_7>" in xml
        assert "<none />" in xml
        assert "<n>3</n>" in xml

    def test_keys_made_valid_element_names(self) -> None:
        xml = to_xml({"my key": "x", "1a": "y", "a/b": "z"})
        assert "<my_key>x</my_key>" in xml
        assert "<item_1a>y</item_1a>" in xml
        assert "<a_b>z</a_b>" in xml

    def test_escaping(self) -> None:
        assert "<q>a &lt; b</q>" in to_xml({"q": "a < b"})

    def test_custom_root(self) -> None:
        assert to_xml({}, root="view").endswith("<view />")
