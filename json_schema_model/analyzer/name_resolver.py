"""
Name resolver for generated types, properties and enum members.

Each strategy is an interface with a default implementation; callers can
plug in their own through GeneratorSettings. Uniqueness is tracked by a
ReservedNameRegistry owned by one generation pass, never by module state.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Iterable

from ..errors import NameCollisionError
from ..schema_ast.nodes import SchemaNode
from ..utils import convert_generic_name, convert_to_upper_camel_case, is_identifier_like

# Placeholder for schemas that give no usable name
ANONYMOUS_TYPE_NAME = "Anonymous"

# Characters turned into "_" in enum members and property names
_UNDERSCORE_CHARS = re.compile(r"[/:,#\\]")


class ReservedNameRegistry:
    """Identifiers already used within one generation pass."""

    def __init__(self, names: Iterable[str] = ()):
        self._names: set[str] = set(names)

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def reserve(self, name: str) -> str:
        self._names.add(name)
        return name

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._names)


class TypeNameGenerator(ABC):
    """Produces the name of a generated type."""

    @abstractmethod
    def generate(
        self,
        node: SchemaNode,
        hint: str | None,
        reserved: ReservedNameRegistry,
        enclosing_name: str | None = None,
    ) -> str:
        """
        Generate a unique type name and reserve it.

        Args:
            node: The schema the type is generated for
            hint: Suggested name (definition key, nested property hint...)
            reserved: Names already used in this generation pass
            enclosing_name: Name of the type that owns node, if any

        Returns:
            A name not previously in reserved
        """


class PropertyNameGenerator(ABC):
    """Produces the identifier of a generated property."""

    @abstractmethod
    def generate(self, node: SchemaNode, name: str) -> str:
        """Generate the identifier for the property called name in the JSON document."""


class EnumNameGenerator(ABC):
    """Produces the identifier of an enum member."""

    @abstractmethod
    def generate(self, index: int, name: str | None, value: Any, node: SchemaNode) -> str:
        """
        Generate the member identifier.

        Args:
            index: Position of the member in the enumeration
            name: Explicit name from x-enumNames, if any
            value: The literal value
            node: The enumeration schema
        """


class DefaultTypeNameGenerator(TypeNameGenerator):
    """x-typeName, then an identifier-like title, then the hint."""

    # Numeric suffixes tried before giving up
    MAX_SUFFIX = 10000

    def __init__(self, anonymous_name: str = ANONYMOUS_TYPE_NAME):
        self.anonymous_name = anonymous_name

    def generate(
        self,
        node: SchemaNode,
        hint: str | None,
        reserved: ReservedNameRegistry,
        enclosing_name: str | None = None,
    ) -> str:
        name = self.generate_candidate(node, hint) or self.anonymous_name
        if name not in reserved:
            return reserved.reserve(name)

        named_enclosing = enclosing_name and not is_anonymous_name(enclosing_name, self.anonymous_name)
        if named_enclosing and not name.startswith(enclosing_name):
            prefixed = enclosing_name + name
            if prefixed not in reserved:
                return reserved.reserve(prefixed)

        for i in range(2, self.MAX_SUFFIX):
            candidate = f"{name}{i}"
            if candidate not in reserved:
                return reserved.reserve(candidate)
        raise NameCollisionError(name, node.pointer)

    def generate_candidate(self, node: SchemaNode, hint: str | None) -> str:
        """The preferred name, before collision handling."""
        if node.type_name_hint:
            return self.sanitize(node.type_name_hint)
        if is_identifier_like(node.title):
            return self.sanitize(node.title)
        if hint:
            return self.sanitize(hint)
        return ""

    @staticmethod
    def sanitize(text: str) -> str:
        text = convert_generic_name(text)
        text = _UNDERSCORE_CHARS.sub("_", text)
        return convert_to_upper_camel_case(text.replace(".", "-").replace("=", "-"))


class DefaultPropertyNameGenerator(PropertyNameGenerator):
    """UpperCamelCase; "." and "=" are word boundaries, "@" and quotes are dropped."""

    def generate(self, node: SchemaNode, name: str) -> str:
        text = name.replace('"', "").replace("@", "").replace(".", "-").replace("=", "-")
        text = _UNDERSCORE_CHARS.sub("_", text)
        return convert_to_upper_camel_case(text) or "Property"


class DefaultEnumNameGenerator(EnumNameGenerator):
    """Explicit names verbatim, otherwise the sanitized literal."""

    def generate(self, index: int, name: str | None, value: Any, node: SchemaNode) -> str:
        if name:
            return name
        if value is None:
            return "Null"
        if isinstance(value, bool):
            return "True" if value else "False"
        if isinstance(value, (int, float)):
            text = str(value)
            if text.startswith("-"):
                return "Minus" + text[1:].replace(".", "_")
            return "_" + text.replace(".", "_")

        text = str(value)
        if text.startswith("_-"):
            text = "__" + text[2:]
        text = text.replace('"', "").replace(".", "_").replace("=", "_")
        text = _UNDERSCORE_CHARS.sub("_", text)
        return convert_to_upper_camel_case(text) or f"Value{index}"


def is_anonymous_name(name: str, anonymous_name: str = ANONYMOUS_TYPE_NAME) -> bool:
    """The placeholder itself or one of its numbered variants (Anonymous2)."""
    return re.fullmatch(re.escape(anonymous_name) + r"\d*", name) is not None


def nested_type_name_hint(enclosing_name: str, property_name: str, anonymous_name: str = ANONYMOUS_TYPE_NAME) -> str:
    """
    Hint for an inline object or enum declared by a property.

    The enclosing class name is used as prefix unless it is itself an
    anonymous placeholder or the property name already starts with it.
    """
    if is_anonymous_name(enclosing_name, anonymous_name):
        return property_name
    if property_name.lower().startswith(enclosing_name.lower()):
        return property_name
    return enclosing_name + convert_to_upper_camel_case(property_name, False)


def unique_member_name(name: str, used: set[str], forbidden: str | None = None) -> str:
    """
    Append an increasing numeric suffix until name is unique.

    Args:
        name: The generated identifier
        used: Identifiers already taken in the same scope (updated)
        forbidden: An extra name the result must differ from (the enclosing type)

    Returns:
        name, or name followed by 1, 2, ...
    """
    candidate = name
    suffix = 1
    while candidate in used or candidate == forbidden:
        candidate = f"{name}{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate
