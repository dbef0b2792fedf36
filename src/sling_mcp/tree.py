"""In-memory content tree: SlingNode and SlingProperty.

A SlingNode mirrors one repository location and its subtree as returned by
``{path}.infinity.json``. String and array entries of the source document
become SlingProperty objects, nested objects become child nodes:

    {"title": "Hi", "tags": ["a", "b"], "child": {"n": "1"}}   at /c

    SlingNode /c
      title = "Hi"
      tags  = ["a", "b"]   (String[])
      SlingNode /c/child
        n = "1"

Two serializations exist:
- to_document(): nested plain dict (display / round trip)
- serialize_for_mutation(): flat form body for the write protocol; only the
  node's own properties, children are saved by separate requests.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from .models import PropertyValue
from .paths import node_name

if TYPE_CHECKING:
    from .client.api_client_core import SlingClientCore

MULTI_VALUE_TYPE_HINT = "String[]"

# Repository-managed metadata, never sent back in a mutation payload.
RESERVED_PROPERTIES = frozenset(
    {
        "jcr:uuid",
        "jcr:created",
        "jcr:predecessors",
        "jcr:createdBy",
        "jcr:mixinTypes",
        "jcr:baseVersion",
        "jcr:versionHistory",
    }
)

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"

_UNSET = object()


def to_wire(value: Any) -> str:
    """Text form of a scalar as the repository sees it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_component(value: Any) -> str:
    return quote(to_wire(value), safe=_URI_COMPONENT_SAFE)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _value_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    return "string"


def loosely_equal(expected: Any, actual: Any) -> bool:
    """Compare values the way the form protocol would see them.

    ``1 == "1"``, ``1 == "01"``, ``1 == "1.0"`` and ``True == "true"``; a
    list compared to a scalar matches its comma-joined text.
    """
    if isinstance(expected, list) and isinstance(actual, list):
        return [to_wire(v) for v in expected] == [to_wire(v) for v in actual]
    if isinstance(expected, list):
        expected = ",".join(to_wire(v) for v in expected)
    if isinstance(actual, list):
        actual = ",".join(to_wire(v) for v in actual)
    if _is_number(expected) or _is_number(actual):
        try:
            return float(expected) == float(actual)
        except (TypeError, ValueError):
            pass
    return to_wire(expected) == to_wire(actual)


class SlingProperty(BaseModel):
    """One named value at a repository path. Immutable.

    ``type_hint`` is derived from the validated value: ``"String[]"`` for a
    list, empty otherwise.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    value: PropertyValue

    def __init__(self, path: str, name: str, value: PropertyValue, **data: Any) -> None:
        super().__init__(path=path, name=name, value=value, **data)

    @field_validator("value")
    @classmethod
    def single_element_kind(cls, v: PropertyValue) -> PropertyValue:
        if isinstance(v, list) and len({_value_kind(item) for item in v}) > 1:
            raise ValueError("multi-value property mixes element types")
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def type_hint(self) -> str:
        return MULTI_VALUE_TYPE_HINT if isinstance(self.value, list) else ""

    def get_path(self) -> str:
        return self.path

    def get_name(self) -> str:
        return self.name

    def get_value(self) -> PropertyValue:
        return self.value

    def get_type_hint(self) -> str:
        return self.type_hint


class SlingNode:
    """A repository location with its properties and ordered child nodes."""

    def __init__(self, path: str, document: Mapping[str, Any] | None = None) -> None:
        self._path = path
        self._name = node_name(path)
        self._properties: dict[str, SlingProperty] = {}
        self._nodes: list[SlingNode] = []

        if document is None:
            return

        for key, value in document.items():
            child_path = path + "/" + key
            if isinstance(value, (str, list)):
                self._properties[key] = SlingProperty(child_path, key, value)
            elif isinstance(value, Mapping):
                self._nodes.append(SlingNode(child_path, value))
            # Bare numbers, booleans and nulls carry no property; use set_property for typed scalars.

    @classmethod
    def from_values(cls, path: str, values: Mapping[str, Any]) -> SlingNode:
        """Build a node from typed input such as a tool call's JSON arguments.

        Unlike the constructor, numbers and booleans become properties too.
        Nested mappings become child nodes built the same way; ``None`` is
        skipped.
        """
        node = cls(path)
        for key, value in values.items():
            if isinstance(value, Mapping):
                node._nodes.append(cls.from_values(path + "/" + key, value))
            elif value is not None:
                node.set_property(key, value)
        return node

    def __repr__(self) -> str:
        return f"SlingNode({self._path!r}, properties={len(self._properties)}, nodes={len(self._nodes)})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return self._path

    @path.setter
    def path(self, path: str) -> None:
        self._path = path

    @property
    def properties(self) -> dict[str, SlingProperty]:
        return self._properties

    @property
    def values(self) -> dict[str, PropertyValue]:
        return {name: prop.value for name, prop in self._properties.items()}

    @property
    def nodes(self) -> list[SlingNode]:
        return self._nodes

    def get_name(self) -> str:
        return self._name

    def get_path(self) -> str:
        return self._path

    def set_path(self, path: str) -> None:
        """Retarget the next save. Stored state on the server is not moved."""
        self._path = path

    def get_properties(self) -> dict[str, SlingProperty]:
        return self._properties

    def get_values(self) -> dict[str, PropertyValue]:
        return self.values

    def get_nodes(self) -> list[SlingNode]:
        return self._nodes

    def get_property(self, name: str) -> SlingProperty | None:
        return self._properties.get(name)

    def set_property(self, name: str, value: PropertyValue) -> SlingProperty:
        """Create or replace a property. List values are marked multi-valued."""
        prop = SlingProperty(self._path + "/" + name, name, value)
        self._properties[name] = prop
        return prop

    def has_property(self, name: str, value: Any = None) -> bool:
        prop = self._properties.get(name)
        if prop is None:
            return False
        if value is None:
            return True
        return loosely_equal(value, prop.value)

    def val(self, name: str, value: Any = _UNSET) -> PropertyValue | None:
        """Shorthand getter/setter: ``val("title")`` reads, ``val("title", "Hi")`` writes."""
        if value is _UNSET:
            prop = self._properties.get(name)
            return prop.value if prop is not None else None
        self.set_property(name, value)
        return None

    def walk(self) -> Iterator[SlingNode]:
        """Depth-first pre-order: this node, then each child subtree in order."""
        yield self
        for child in self._nodes:
            yield from child.walk()

    def to_document(self) -> dict[str, Any]:
        data: dict[str, Any] = {name: prop.value for name, prop in self._properties.items()}
        for child in self._nodes:
            data[child.name] = child.to_document()
        return data

    def serialize_for_mutation(self) -> str:
        """Form-encoded payload of this node's own non-reserved properties.

        Multi-valued properties repeat the key once per element, then add a
        single ``name@TypeHint=String[]`` pair so that one remaining value is
        still stored as an array.
        """
        pairs: list[str] = []
        for name, prop in self._properties.items():
            if name in RESERVED_PROPERTIES:
                continue
            if isinstance(prop.value, list):
                for item in prop.value:
                    pairs.append(f"{name}={encode_component(item)}")
            else:
                pairs.append(f"{name}={encode_component(prop.value)}")
            if prop.type_hint:
                pairs.append(f"{name}@TypeHint={encode_component(prop.type_hint)}")
        return "&".join(pairs)

    async def save(self, client: SlingClientCore) -> httpx.Response:
        """POST this node's properties to its current path."""
        return await client.save_node(self)
