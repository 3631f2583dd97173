"""
Schema node definitions.

A SchemaNode holds one parsed JSON Schema object and its raw keywords.
References are stored as raw strings by the parser and bound to their
target node by the ReferenceResolver; nothing is mutated after that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any


class JsonObjectType(IntFlag):
    """Bitset of the JSON types a schema accepts."""

    NONE = 0
    NULL = 1
    BOOLEAN = 2
    INTEGER = 4
    NUMBER = 8
    STRING = 16
    ARRAY = 32
    OBJECT = 64
    FILE = 128

    @classmethod
    def from_name(cls, name: str) -> JsonObjectType:
        return _TYPE_NAMES.get(name, cls.NONE)

    def names(self) -> list[str]:
        return [name for name, flag in _TYPE_NAMES.items() if flag in self]


_TYPE_NAMES: dict[str, JsonObjectType] = {
    "null": JsonObjectType.NULL,
    "boolean": JsonObjectType.BOOLEAN,
    "integer": JsonObjectType.INTEGER,
    "number": JsonObjectType.NUMBER,
    "string": JsonObjectType.STRING,
    "array": JsonObjectType.ARRAY,
    "object": JsonObjectType.OBJECT,
    "file": JsonObjectType.FILE,
}

PRIMITIVE_TYPES = (
    JsonObjectType.STRING
    | JsonObjectType.INTEGER
    | JsonObjectType.NUMBER
    | JsonObjectType.BOOLEAN
    | JsonObjectType.FILE
)


# eq=False keeps identity hashing: nodes are keys of the resolver's side tables
@dataclass(eq=False)
class SchemaNode:
    """One JSON Schema object."""

    # JSON pointer of this node inside its document (e.g. "#/definitions/Pet")
    pointer: str = "#"

    type_flags: JsonObjectType = JsonObjectType.NONE

    # Raw "$ref" string and the bound target
    reference_path: str | None = None
    reference: SchemaNode | None = field(default=None, repr=False)

    # Object keywords
    properties: dict[str, SchemaNode] = field(default_factory=dict)
    required_names: list[str] = field(default_factory=list)
    additional_properties: bool | SchemaNode = True
    pattern_properties: dict[str, SchemaNode] = field(default_factory=dict)
    min_properties: int | None = None
    max_properties: int | None = None

    # Array keywords
    item: SchemaNode | None = None
    items: list[SchemaNode] = field(default_factory=list)
    additional_items: bool | SchemaNode = True
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False

    definitions: dict[str, SchemaNode] = field(default_factory=dict)

    # Combinators
    all_of: list[SchemaNode] = field(default_factory=list)
    any_of: list[SchemaNode] = field(default_factory=list)
    one_of: list[SchemaNode] = field(default_factory=list)
    not_schema: SchemaNode | None = None

    enumeration: list[Any] = field(default_factory=list)
    enumeration_names: list[str] = field(default_factory=list)
    has_const: bool = False
    const: Any = None

    # Numeric and string constraints
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    format: str | None = None

    # Metadata
    title: str | None = None
    description: str | None = None
    default: Any = None
    has_default: bool = False
    discriminator: str | None = None
    type_name_hint: str | None = None
    read_only: bool = False
    # x-nullable as written; None when absent
    explicit_nullable: bool | None = None
    # OpenAPI 3 nullable as written; None when absent
    openapi_nullable: bool | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    parent: SchemaNode | None = field(default=None, repr=False)

    @property
    def has_reference(self) -> bool:
        return self.reference_path is not None

    @property
    def is_definition(self) -> bool:
        return self.parent is not None and any(d is self for d in self.parent.definitions.values())

    @property
    def is_enumeration(self) -> bool:
        return bool(self.enumeration)

    @property
    def is_array(self) -> bool:
        return JsonObjectType.ARRAY in self.type_flags or self.item is not None or bool(self.items)

    @property
    def is_object(self) -> bool:
        return JsonObjectType.OBJECT in self.type_flags or bool(self.properties) or bool(self.all_of)

    @property
    def has_dictionary_value(self) -> bool:
        return isinstance(self.additional_properties, SchemaNode) or bool(self.pattern_properties)

    @property
    def has_type_information(self) -> bool:
        return (
            self.type_flags != JsonObjectType.NONE
            or self.is_enumeration
            or self.is_array
            or self.is_object
            or self.has_dictionary_value
            or bool(self.any_of)
            or bool(self.one_of)
        )

    def children(self) -> list[SchemaNode]:
        """Direct structural children, in document order."""
        nodes: list[SchemaNode] = list(self.definitions.values())
        nodes.extend(self.properties.values())
        if isinstance(self.additional_properties, SchemaNode):
            nodes.append(self.additional_properties)
        nodes.extend(self.pattern_properties.values())
        if self.item is not None:
            nodes.append(self.item)
        nodes.extend(self.items)
        if isinstance(self.additional_items, SchemaNode):
            nodes.append(self.additional_items)
        nodes.extend(self.all_of)
        nodes.extend(self.any_of)
        nodes.extend(self.one_of)
        if self.not_schema is not None:
            nodes.append(self.not_schema)
        return nodes
