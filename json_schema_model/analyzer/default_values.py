"""
Default value resolution for generated properties.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import GenerationWarning
from ..schema_ast.nodes import SchemaNode
from .ir_nodes import (
    NO_DEFAULT,
    DefaultValueDescriptor,
    DefaultValueKind,
    EnumMember,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

_CONTAINER_DEFAULTS = {
    TypeKind.ARRAY: DefaultValueKind.EMPTY_ARRAY,
    TypeKind.DICTIONARY: DefaultValueKind.EMPTY_DICTIONARY,
    TypeKind.OBJECT: DefaultValueKind.NEW_OBJECT,
}


def _same_literal(a: Any, b: Any) -> bool:
    # 1 == True in Python, but not in JSON
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b


class DefaultValueResolver:
    """Computes the default descriptor of a property."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        generate_default_values: bool,
        warnings: list[GenerationWarning],
    ):
        """
        Initialize the resolver.

        Args:
            resolver: Reference resolver of the document
            generate_default_values: Whether raw "default" values are used at all
            warnings: Warning list of the current generation pass (appended to)
        """
        self.resolver = resolver
        self.generate_default_values = generate_default_values
        self.warnings = warnings

    def resolve(
        self,
        property_node: SchemaNode,
        is_nullable: bool,
        type_ref: TypeRef,
        enum_type: TypeDescriptor | None = None,
        base_type_abstract: bool = False,
    ) -> DefaultValueDescriptor:
        """
        Compute the default descriptor.

        Args:
            property_node: The property schema
            is_nullable: Result of the nullability policy for the property
            type_ref: The resolved type of the property
            enum_type: The generated enum when the property is an enumeration
            base_type_abstract: Whether an object-typed property points to an abstract type

        Returns:
            A DefaultValueDescriptor (kind NONE when nothing applies)
        """
        if self.generate_default_values:
            raw = self._raw_default(property_node)
            if raw is not None:
                (value,) = raw
                if enum_type is not None:
                    return self._enum_default(property_node, value, enum_type)
                return DefaultValueDescriptor(kind=DefaultValueKind.LITERAL, value=value)

        if not is_nullable:
            kind = _CONTAINER_DEFAULTS.get(type_ref.kind)
            if kind == DefaultValueKind.NEW_OBJECT and base_type_abstract:
                return NO_DEFAULT
            if kind is not None:
                return DefaultValueDescriptor(kind=kind)
        return NO_DEFAULT

    def _raw_default(self, node: SchemaNode) -> tuple[Any] | None:
        """The default written on the property, else on its actual schema."""
        if node.has_default:
            return (node.default,)
        actual = self.resolver.actual_type_schema(node)
        if actual.has_default:
            return (actual.default,)
        return None

    def _enum_default(self, node: SchemaNode, value: Any, enum_type: TypeDescriptor) -> DefaultValueDescriptor:
        member, converted = self._match_member(value, enum_type.enum_members)
        if member is None:
            self._warn(node, f"Default value {value!r} matches no member of enum '{enum_type.name}'")
            return DefaultValueDescriptor(kind=DefaultValueKind.LITERAL, value=value)
        if converted:
            self._warn(
                node,
                f"Default value {value!r} matched member '{member.name}' of enum '{enum_type.name}' "
                f"only after conversion to {member.value!r}",
            )
        return DefaultValueDescriptor(
            kind=DefaultValueKind.ENUM_MEMBER,
            value=member.value,
            enum_type=enum_type.name,
            enum_member=member.name,
        )

    @staticmethod
    def _match_member(value: Any, members: tuple[EnumMember, ...]) -> tuple[EnumMember | None, bool]:
        """Match by raw value, then by member name, then by string form (flagged as converted)."""
        for member in members:
            if _same_literal(member.value, value):
                return member, False
        for member in members:
            if isinstance(value, str) and member.name == value:
                return member, False
        for member in members:
            if str(member.value) == str(value):
                return member, True
        return None, False

    def _warn(self, node: SchemaNode, message: str) -> None:
        logger.warning("%s (%s)", message, node.pointer)
        self.warnings.append(GenerationWarning(node.pointer, message))
