"""
Type classification and nullability policy.

Maps a resolved node to one TypeKind. Nullability lives here too because
the dialects disagree on it: generators must call is_nullable() instead of
looking at the NULL type flag themselves.
"""

from __future__ import annotations

from ..config import SchemaDialect
from ..schema_ast.nodes import PRIMITIVE_TYPES, JsonObjectType, SchemaNode
from .ir_nodes import TypeKind
from .reference_resolver import ReferenceResolver

_PRIMITIVE_NAMES = {
    JsonObjectType.STRING: "string",
    JsonObjectType.INTEGER: "integer",
    JsonObjectType.NUMBER: "number",
    JsonObjectType.BOOLEAN: "boolean",
    JsonObjectType.FILE: "file",
}


def has_null_type(node: SchemaNode, dialect: SchemaDialect = SchemaDialect.JSON_SCHEMA) -> bool:
    """Whether node accepts null through its type, x-nullable or a null alternative (following $ref)."""
    seen: set[SchemaNode] = set()
    current: SchemaNode | None = node
    while current is not None and current not in seen:
        seen.add(current)
        if accepts_null(current, dialect):
            return True
        for alternative in current.one_of + current.any_of:
            if alternative.type_flags == JsonObjectType.NULL and not alternative.has_reference:
                return True
        current = current.reference
    return False


def accepts_null(node: SchemaNode, dialect: SchemaDialect) -> bool:
    """Whether a null value satisfies the type keywords of node itself."""
    if JsonObjectType.NULL in node.type_flags or node.explicit_nullable:
        return True
    return dialect == SchemaDialect.OPENAPI3 and bool(node.openapi_nullable)


def is_nullable(node: SchemaNode, is_in_required_list: bool, dialect: SchemaDialect) -> bool:
    """
    Decide whether a property may hold null.

    Args:
        node: The property schema (the wrapper, not its actual schema)
        is_in_required_list: Whether the enclosing object lists the property as required
        dialect: The schema dialect

    Returns:
        True if generated code must allow null for this property
    """
    if dialect == SchemaDialect.SWAGGER2:
        # No null type in Swagger 2: optional means nullable, required wins over everything
        if is_in_required_list:
            return False
        return node.explicit_nullable is not False

    if dialect == SchemaDialect.OPENAPI3:
        explicit = node.openapi_nullable if node.openapi_nullable is not None else node.explicit_nullable
        if explicit is not None:
            return explicit
        if has_null_type(node, dialect):
            return True
        return not is_in_required_list

    return has_null_type(node)


class TypeClassifier:
    """Classifies schema nodes into TypeKind."""

    def __init__(self, resolver: ReferenceResolver):
        self.resolver = resolver

    def classify(self, node: SchemaNode) -> TypeKind:
        """
        Classify the actual type schema of node, first matching rule wins.

        Args:
            node: Any schema node

        Returns:
            The TypeKind of the type generated for node
        """
        return self.classify_schema(self.resolver.actual_type_schema(node))

    def classify_schema(self, schema: SchemaNode) -> TypeKind:
        """Classify schema itself, without unwrapping reference-only combinators."""
        if schema.is_enumeration:
            return TypeKind.ENUM

        if schema.is_array:
            return TypeKind.ARRAY

        if schema.is_object:
            if not schema.properties and not schema.all_of and schema.has_dictionary_value:
                return TypeKind.DICTIONARY
            return TypeKind.OBJECT

        if schema.has_dictionary_value and schema.type_flags == JsonObjectType.NONE:
            return TypeKind.DICTIONARY

        if self.primitive_name(schema) is not None:
            return TypeKind.PRIMITIVE

        return TypeKind.ANY

    @staticmethod
    def primitive_name(node: SchemaNode) -> str | None:
        """The primitive type name when exactly one primitive flag is set (NULL aside)."""
        flags = node.type_flags & PRIMITIVE_TYPES
        return _PRIMITIVE_NAMES.get(flags)

    def dictionary_value_schema(self, node: SchemaNode) -> SchemaNode | None:
        """The schema of dictionary values: additionalProperties, then the first pattern property."""
        schema = self.resolver.actual_type_schema(node)
        if isinstance(schema.additional_properties, SchemaNode):
            return schema.additional_properties
        for value_schema in schema.pattern_properties.values():
            return value_schema
        return None

    def enum_value_type(self, node: SchemaNode) -> str:
        """The primitive type of enumeration values ("string" unless all are numbers)."""
        schema = self.resolver.actual_type_schema(node)
        primitive = self.primitive_name(schema)
        if primitive in ("integer", "number"):
            return primitive
        values = [v for v in schema.enumeration if v is not None]
        if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return "integer"
        if values and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
            return "number"
        return primitive or "string"
