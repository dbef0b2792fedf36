"""Tests for SlingNode construction, access and mutation.

Verifies:
- strings/arrays become properties, objects become children, other scalars are skipped
- every property and child path is parent path + "/" + local name
- has_property uses loose equality: numeric coercion, then wire text
- set_property/val replace properties and keep the multi-value hint
- walk() is pre-order, to_document() rebuilds the nested view
"""

from typing import Any

import pytest
from pydantic import ValidationError

from sling_mcp.tree import MULTI_VALUE_TYPE_HINT, SlingNode, SlingProperty


@pytest.fixture
def node(sample_document: dict[str, Any]) -> SlingNode:
    return SlingNode("/c", sample_document)


class TestConstruction:
    def test_scalar_property(self, node: SlingNode) -> None:
        title = node.get_property("title")
        assert title is not None
        assert title.value == "Hi"
        assert title.type_hint == ""
        assert title.path == "/c/title"

    def test_array_property_gets_type_hint(self, node: SlingNode) -> None:
        tags = node.get_property("tags")
        assert tags is not None
        assert tags.value == ["a", "b"]
        assert tags.type_hint == MULTI_VALUE_TYPE_HINT

    def test_object_becomes_child(self, node: SlingNode) -> None:
        assert len(node.nodes) == 1
        child = node.nodes[0]
        assert child.path == "/c/child"
        assert child.name == "child"
        assert child.values == {"n": "1"}
        assert child.get_property("n").path == "/c/child/n"

    def test_children_keep_document_order(self) -> None:
        node = SlingNode("/c", {"b": {}, "a": {}, "title": "x", "c": {}})
        assert [child.name for child in node.nodes] == ["b", "a", "c"]

    def test_bare_scalars_are_skipped(self) -> None:
        node = SlingNode("/c", {"count": 3, "flag": True, "nothing": None, "title": "t"})
        assert list(node.properties) == ["title"]
        assert node.nodes == []

    def test_no_document(self) -> None:
        node = SlingNode("/content/new")
        assert node.name == "new"
        assert node.properties == {}
        assert node.nodes == []

    def test_name_is_fixed_at_construction(self, node: SlingNode) -> None:
        node.set_path("/elsewhere/other")
        assert node.get_path() == "/elsewhere/other"
        assert node.get_name() == "c"

    def test_reserved_properties_are_kept_in_memory(self) -> None:
        node = SlingNode("/c", {"jcr:uuid": "123", "jcr:mixinTypes": ["mix:versionable"], "title": "t"})
        assert "jcr:uuid" in node.get_properties()
        assert node.get_values()["jcr:mixinTypes"] == ["mix:versionable"]


class TestFromValues:
    def test_typed_scalars_become_properties(self) -> None:
        node = SlingNode.from_values("/c", {"count": 5, "hidden": True, "title": "Hi", "gone": None})
        assert node.values == {"count": 5, "hidden": True, "title": "Hi"}

    def test_mappings_become_children(self) -> None:
        node = SlingNode.from_values("/c", {"child": {"n": 1, "grand": {"ok": False}}})
        assert [n.path for n in node.walk()] == ["/c", "/c/child", "/c/child/grand"]
        assert node.nodes[0].val("n") == 1
        assert node.nodes[0].nodes[0].val("ok") is False


class TestHasProperty:
    def test_matching_value(self, node: SlingNode) -> None:
        assert node.has_property("title", "Hi")

    def test_other_value(self, node: SlingNode) -> None:
        assert not node.has_property("title", "Bye")

    def test_missing(self, node: SlingNode) -> None:
        assert not node.has_property("missing")

    def test_name_only(self, node: SlingNode) -> None:
        assert node.has_property("tags")

    def test_loose_numeric_equality(self) -> None:
        node = SlingNode("/c", {"n": "1"})
        assert node.has_property("n", 1)
        assert node.has_property("n", 1.0)

    @pytest.mark.parametrize("stored", ["1.0", "01", " 1 "])
    def test_numeric_text_coerces(self, stored: str) -> None:
        node = SlingNode("/c", {"n": stored})
        assert node.has_property("n", 1)
        assert not node.has_property("n", 2)

    def test_number_against_non_numeric_text(self) -> None:
        node = SlingNode("/c", {"n": "one"})
        assert not node.has_property("n", 1)

    def test_loose_boolean_equality(self) -> None:
        node = SlingNode("/c")
        node.set_property("hidden", True)
        assert node.has_property("hidden", "true")
        assert not node.has_property("hidden", "false")

    def test_array_against_joined_text(self, node: SlingNode) -> None:
        assert node.has_property("tags", "a,b")
        assert node.has_property("tags", ["a", "b"])
        assert not node.has_property("tags", ["b", "a"])


class TestMutation:
    def test_set_property_creates(self) -> None:
        node = SlingNode("/c")
        prop = node.set_property("count", 3)
        assert node.get_property("count") is prop
        assert prop.path == "/c/count"
        assert prop.type_hint == ""

    def test_set_property_replaces_instance(self, node: SlingNode) -> None:
        old = node.get_property("title")
        node.set_property("title", "Bye")
        assert node.get_property("title") is not old
        assert node.get_property("title").value == "Bye"
        assert old.value == "Hi"

    def test_set_property_uses_current_path(self) -> None:
        node = SlingNode("/c")
        node.path = "/d"
        assert node.set_property("x", "1").path == "/d/x"

    def test_set_array_property(self) -> None:
        node = SlingNode("/c")
        prop = node.set_property("sizes", [1, 2])
        assert prop.type_hint == MULTI_VALUE_TYPE_HINT

    def test_tuple_value_is_stored_as_multi_value(self) -> None:
        node = SlingNode("/c")
        prop = node.set_property("tags", ("a", "b"))  # type: ignore[arg-type]
        assert prop.value == ["a", "b"]
        assert prop.type_hint == MULTI_VALUE_TYPE_HINT

    def test_mixed_multi_value_is_rejected(self) -> None:
        node = SlingNode("/c")
        with pytest.raises(ValidationError):
            node.set_property("tags", ["a", 1])
        assert node.get_property("tags") is None

    def test_ints_and_floats_share_a_multi_value(self) -> None:
        assert SlingNode("/c").set_property("sizes", [1, 2.5]).value == [1, 2.5]

    def test_val_get_and_set(self, node: SlingNode) -> None:
        assert node.val("title") == "Hi"
        assert node.val("missing") is None
        node.val("title", "Changed")
        assert node.val("title") == "Changed"

    def test_property_is_immutable(self, node: SlingNode) -> None:
        with pytest.raises(ValidationError):
            node.get_property("title").value = "nope"  # type: ignore[misc]


class TestTraversal:
    def test_walk_is_preorder(self) -> None:
        root = SlingNode("/r", {"a": {"a1": {}, "a2": {}}, "b": {"b1": {}}})
        assert [n.path for n in root.walk()] == ["/r", "/r/a", "/r/a/a1", "/r/a/a2", "/r/b", "/r/b/b1"]

    def test_to_document_round_trip(self, node: SlingNode, sample_document: dict[str, Any]) -> None:
        assert node.to_document() == sample_document

    def test_to_document_includes_set_scalars(self) -> None:
        node = SlingNode("/c", {"title": "t"})
        node.set_property("count", 3)
        assert node.to_document() == {"title": "t", "count": 3}


def test_property_accessors() -> None:
    prop = SlingProperty("/c/tags", "tags", ["a"])
    assert prop.get_path() == "/c/tags"
    assert prop.get_name() == "tags"
    assert prop.get_value() == ["a"]
    assert prop.get_type_hint() == "String[]"
