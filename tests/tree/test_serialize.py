"""Tests for the form-encoded mutation payload."""

from typing import Any
from urllib.parse import parse_qsl

from sling_mcp.tree import RESERVED_PROPERTIES, SlingNode, encode_component, to_wire


class TestSerializeForMutation:
    def test_exact_payload(self, sample_document: dict[str, Any]) -> None:
        node = SlingNode("/c", sample_document)
        assert node.serialize_for_mutation() == "title=Hi&tags=a&tags=b&tags@TypeHint=String%5B%5D"

    def test_decoded_pairs_in_property_order(self, sample_document: dict[str, Any]) -> None:
        node = SlingNode("/c", sample_document)
        assert parse_qsl(node.serialize_for_mutation()) == [
            ("title", "Hi"),
            ("tags", "a"),
            ("tags", "b"),
            ("tags@TypeHint", "String[]"),
        ]

    def test_children_are_not_inlined(self) -> None:
        node = SlingNode("/c", {"child": {"n": "1"}})
        assert node.serialize_for_mutation() == ""

    def test_reserved_properties_are_excluded(self) -> None:
        document = {name: "x" for name in RESERVED_PROPERTIES}
        document["jcr:title"] = "kept"
        node = SlingNode("/c", document)
        assert parse_qsl(node.serialize_for_mutation()) == [("jcr:title", "kept")]

    def test_values_are_url_encoded(self) -> None:
        node = SlingNode("/c", {"text": "a&b=c d/é"})
        assert node.serialize_for_mutation() == "text=a%26b%3Dc%20d%2F%C3%A9"

    def test_typed_scalars(self) -> None:
        node = SlingNode("/c")
        node.set_property("count", 3)
        node.set_property("ratio", 2.0)
        node.set_property("hidden", False)
        assert node.serialize_for_mutation() == "count=3&ratio=2&hidden=false"

    def test_single_element_array_keeps_hint(self) -> None:
        node = SlingNode("/c", {"tags": ["only"]})
        assert parse_qsl(node.serialize_for_mutation()) == [("tags", "only"), ("tags@TypeHint", "String[]")]


def test_encode_component_safe_set() -> None:
    assert encode_component("-_.!~*'()") == "-_.!~*'()"
    assert encode_component("[x]") == "%5Bx%5D"


def test_to_wire() -> None:
    assert to_wire(True) == "true"
    assert to_wire(1.5) == "1.5"
    assert to_wire(7) == "7"
