"""
IR (Intermediate Representation) node definitions.

These descriptors are what generators consume. They are created once per
generation pass, never mutated, and never shared between passes because
naming and dialect settings may differ from one pass to the next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import GenerationWarning


class TypeKind(Enum):
    """Kind of type in the IR."""

    OBJECT = "object"
    ARRAY = "array"
    DICTIONARY = "dictionary"
    ENUM = "enum"
    PRIMITIVE = "primitive"
    ANY = "any"


class RequiredMode(Enum):
    """How a property must appear on the wire."""

    ALWAYS = "always"  # Required and never null
    ALLOW_NULL = "allow_null"  # Required, may be null
    DISALLOW_NULL = "disallow_null"  # Optional, never null when present
    DEFAULT = "default"  # Optional and nullable


class DefaultValueKind(Enum):
    """Kind of default value a generator should emit."""

    NONE = "none"
    LITERAL = "literal"
    ENUM_MEMBER = "enum_member"
    EMPTY_ARRAY = "empty_array"
    EMPTY_DICTIONARY = "empty_dictionary"
    NEW_OBJECT = "new_object"


@dataclass(frozen=True)
class TypeRef:
    """A language-agnostic reference to the type of a property or item."""

    kind: TypeKind = TypeKind.ANY
    name: str | None = None  # Generated type name (objects, enums)
    primitive: str | None = None  # "string", "integer", "number", "boolean", "file"
    format: str | None = None
    item: TypeRef | None = None  # Arrays
    items: tuple[TypeRef, ...] = ()  # Tuple arrays
    value: TypeRef | None = None  # Dictionaries
    alternatives: tuple[TypeRef, ...] = ()  # anyOf / oneOf of ANY types
    is_nullable: bool = False

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kind": self.kind.value}
        if self.name is not None:
            d["name"] = self.name
        if self.primitive is not None:
            d["primitive"] = self.primitive
        if self.format is not None:
            d["format"] = self.format
        if self.item is not None:
            d["item"] = self.item.to_dict()
        if self.items:
            d["items"] = [i.to_dict() for i in self.items]
        if self.value is not None:
            d["value"] = self.value.to_dict()
        if self.alternatives:
            d["alternatives"] = [a.to_dict() for a in self.alternatives]
        if self.is_nullable:
            d["nullable"] = True
        return d


@dataclass(frozen=True)
class DefaultValueDescriptor:
    """Structured default of a property."""

    kind: DefaultValueKind = DefaultValueKind.NONE
    value: Any = None
    enum_type: str | None = None
    enum_member: str | None = None

    @property
    def has_value(self) -> bool:
        return self.kind != DefaultValueKind.NONE

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kind": self.kind.value}
        if self.kind == DefaultValueKind.LITERAL:
            d["value"] = self.value
        if self.kind == DefaultValueKind.ENUM_MEMBER:
            d["value"] = self.value
            d["enum_type"] = self.enum_type
            d["enum_member"] = self.enum_member
        return d


NO_DEFAULT = DefaultValueDescriptor()


@dataclass(frozen=True)
class PropertyDescriptor:
    """A property of a generated object type."""

    name: str = ""  # Generated identifier
    json_name: str = ""  # Name in the JSON document
    type_ref: TypeRef = field(default_factory=TypeRef)
    is_nullable: bool = False
    is_required: bool = False
    required_mode: RequiredMode = RequiredMode.DEFAULT
    default: DefaultValueDescriptor = NO_DEFAULT
    description: str | None = None
    is_read_only: bool = False
    # Validation keywords (minimum, maxLength, pattern...) for data annotations
    constraints: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> TypeKind:
        return self.type_ref.kind

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "json_name": self.json_name,
            "kind": self.kind.value,
            "type": self.type_ref.to_dict(),
            "is_nullable": self.is_nullable,
            "is_required": self.is_required,
            "required_mode": self.required_mode.value,
            "default": self.default.to_dict(),
        }
        if self.description:
            d["description"] = self.description
        if self.is_read_only:
            d["read_only"] = True
        if self.constraints:
            d["constraints"] = dict(self.constraints)
        return d


@dataclass(frozen=True)
class EnumMember:
    """One member of a generated enum."""

    name: str
    value: Any
    description: str | None = None


@dataclass(frozen=True)
class TypeDescriptor:
    """One generated type."""

    kind: TypeKind
    name: str
    schema_pointer: str = "#"
    base_type: str | None = None
    properties: tuple[PropertyDescriptor, ...] = ()
    enum_members: tuple[EnumMember, ...] = ()
    # "string" or "integer"/"number" for enums, primitive name for primitives
    value_type: str | None = None
    item_type: TypeRef | None = None  # Arrays
    dictionary_value_type: TypeRef | None = None  # Dictionaries
    # anyOf / oneOf alternatives of ANY types
    alternatives: tuple[TypeRef, ...] = ()
    combinator: str | None = None
    description: str | None = None
    discriminator: str | None = None
    is_abstract: bool = False

    def property(self, json_name: str) -> PropertyDescriptor | None:
        for prop in self.properties:
            if prop.json_name == json_name:
                return prop
        return None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
            "schema_pointer": self.schema_pointer,
        }
        if self.base_type:
            d["base_type"] = self.base_type
        if self.properties:
            d["properties"] = [p.to_dict() for p in self.properties]
        if self.enum_members:
            d["enum_members"] = [{"name": m.name, "value": m.value} for m in self.enum_members]
        if self.value_type:
            d["value_type"] = self.value_type
        if self.item_type is not None:
            d["item_type"] = self.item_type.to_dict()
        if self.dictionary_value_type is not None:
            d["dictionary_value_type"] = self.dictionary_value_type.to_dict()
        if self.alternatives:
            d["combinator"] = self.combinator
            d["alternatives"] = [a.to_dict() for a in self.alternatives]
        if self.description:
            d["description"] = self.description
        if self.discriminator:
            d["discriminator"] = self.discriminator
        if self.is_abstract:
            d["is_abstract"] = True
        return d


@dataclass
class GenerationResult:
    """Output of one generation pass."""

    types: list[TypeDescriptor] = field(default_factory=list)
    warnings: list[GenerationWarning] = field(default_factory=list)
    root_type: str | None = None

    def get(self, name: str) -> TypeDescriptor | None:
        for descriptor in self.types:
            if descriptor.name == name:
                return descriptor
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_type": self.root_type,
            "types": [t.to_dict() for t in self.types],
            "warnings": [w.to_dict() for w in self.warnings],
        }
