"""
JSON Schema parser that builds the SchemaNode graph.

Phase 1 of the pipeline: turn the decoded JSON document into SchemaNode
objects without following any $ref. References are bound afterwards by
the ReferenceResolver.
"""

from __future__ import annotations

from typing import Any

from ..errors import SchemaParseError
from .nodes import JsonObjectType, SchemaNode

# Keywords holding a name -> schema mapping
_SCHEMA_MAPS = ("definitions", "$defs")


def escape_pointer_token(token: str) -> str:
    """Escape one reference token as described in RFC 6901."""
    return token.replace("~", "~0").replace("/", "~1")


class SchemaParser:
    """Parses a decoded JSON Schema document into SchemaNode objects."""

    def parse(self, schema: dict[str, Any] | bool) -> SchemaNode:
        """
        Parse a JSON Schema document.

        OpenAPI 3 documents keep their schemas under components/schemas;
        they are attached to the root as definitions so that references to
        "#/components/schemas/..." resolve like any other definition.

        Args:
            schema: The decoded JSON Schema document

        Returns:
            The root SchemaNode
        """
        root = self._parse_schema_node(schema, "#", None)
        if isinstance(schema, dict):
            components = schema.get("components")
            if isinstance(components, dict) and isinstance(components.get("schemas"), dict):
                self._parse_schema_map(root, components["schemas"], "#/components/schemas")
        return root

    def _parse_schema_node(self, schema: Any, path: str, parent: SchemaNode | None) -> SchemaNode:
        """
        Parse a schema node recursively.

        Args:
            schema: The schema dictionary (or a boolean schema)
            path: JSON pointer of the schema in the document
            parent: The containing node

        Returns:
            The parsed SchemaNode
        """
        if schema is True:
            return SchemaNode(pointer=path, parent=parent)
        if schema is False:
            node = SchemaNode(pointer=path, parent=parent)
            node.not_schema = SchemaNode(pointer=f"{path}/not", parent=node)
            return node
        if not isinstance(schema, dict):
            raise SchemaParseError(f"Expected a schema object at '{path}', got {type(schema).__name__}", path)

        node = SchemaNode(pointer=path, parent=parent)

        ref = schema.get("$ref")
        if isinstance(ref, str):
            node.reference_path = ref

        self._parse_type(node, schema.get("type"))
        self._parse_metadata(node, schema)
        self._parse_constraints(node, schema)
        self._parse_object_keywords(node, schema, path)
        self._parse_array_keywords(node, schema, path)
        self._parse_combinators(node, schema, path)

        if "enum" in schema and isinstance(schema["enum"], list):
            node.enumeration = list(schema["enum"])
            names = schema.get("x-enumNames") or schema.get("x-enum-varnames")
            if isinstance(names, list):
                node.enumeration_names = [str(n) for n in names]

        if "const" in schema:
            node.has_const = True
            node.const = schema["const"]

        for name in _SCHEMA_MAPS:
            if isinstance(schema.get(name), dict):
                self._parse_schema_map(node, schema[name], f"{path}/{name}")

        return node

    def _parse_schema_map(self, node: SchemaNode, mapping: dict[str, Any], path: str) -> None:
        """Parse a definitions-like mapping into node.definitions."""
        for name, def_schema in mapping.items():
            # Skip comment fields (strings) like the code generators do
            if isinstance(def_schema, str):
                continue
            node.definitions[name] = self._parse_schema_node(
                def_schema, f"{path}/{escape_pointer_token(name)}", node
            )

    def _parse_type(self, node: SchemaNode, type_value: Any) -> None:
        if isinstance(type_value, str):
            node.type_flags = JsonObjectType.from_name(type_value)
        elif isinstance(type_value, list):
            flags = JsonObjectType.NONE
            for name in type_value:
                if isinstance(name, str):
                    flags |= JsonObjectType.from_name(name)
            node.type_flags = flags

    def _parse_metadata(self, node: SchemaNode, schema: dict[str, Any]) -> None:
        node.title = schema.get("title")
        node.description = schema.get("description")
        if "default" in schema:
            node.has_default = True
            node.default = schema["default"]
        node.type_name_hint = schema.get("x-typeName")
        node.read_only = bool(schema.get("readOnly", schema.get("x-readOnly", False)))

        discriminator = schema.get("discriminator")
        if isinstance(discriminator, dict):
            node.discriminator = discriminator.get("propertyName")
        elif isinstance(discriminator, str):
            node.discriminator = discriminator

        if "x-nullable" in schema:
            node.explicit_nullable = bool(schema["x-nullable"])
        if "nullable" in schema:
            node.openapi_nullable = bool(schema["nullable"])

        node.extensions = {k: v for k, v in schema.items() if k.startswith("x-")}

    def _parse_constraints(self, node: SchemaNode, schema: dict[str, Any]) -> None:
        node.minimum = schema.get("minimum")
        node.maximum = schema.get("maximum")

        # Draft-04 uses booleans, draft-06 and later use the bound itself
        exclusive_minimum = schema.get("exclusiveMinimum")
        if isinstance(exclusive_minimum, bool):
            node.exclusive_minimum = exclusive_minimum
        elif isinstance(exclusive_minimum, (int, float)):
            if node.minimum is None or exclusive_minimum >= node.minimum:
                node.minimum = exclusive_minimum
                node.exclusive_minimum = True

        exclusive_maximum = schema.get("exclusiveMaximum")
        if isinstance(exclusive_maximum, bool):
            node.exclusive_maximum = exclusive_maximum
        elif isinstance(exclusive_maximum, (int, float)):
            if node.maximum is None or exclusive_maximum <= node.maximum:
                node.maximum = exclusive_maximum
                node.exclusive_maximum = True

        node.multiple_of = schema.get("multipleOf")
        node.min_length = schema.get("minLength")
        node.max_length = schema.get("maxLength")
        node.pattern = schema.get("pattern")
        node.format = schema.get("format")
        node.min_items = schema.get("minItems")
        node.max_items = schema.get("maxItems")
        node.unique_items = bool(schema.get("uniqueItems", False))
        node.min_properties = schema.get("minProperties")
        node.max_properties = schema.get("maxProperties")

    def _parse_object_keywords(self, node: SchemaNode, schema: dict[str, Any], path: str) -> None:
        properties = schema.get("properties")
        if isinstance(properties, dict):
            for name, prop_schema in properties.items():
                node.properties[name] = self._parse_schema_node(
                    prop_schema, f"{path}/properties/{escape_pointer_token(name)}", node
                )

        required = schema.get("required")
        if isinstance(required, list):
            node.required_names = [r for r in required if isinstance(r, str)]

        additional = schema.get("additionalProperties", True)
        if isinstance(additional, bool):
            node.additional_properties = additional
        elif isinstance(additional, dict):
            node.additional_properties = self._parse_schema_node(additional, f"{path}/additionalProperties", node)

        pattern_properties = schema.get("patternProperties")
        if isinstance(pattern_properties, dict):
            for pattern, prop_schema in pattern_properties.items():
                node.pattern_properties[pattern] = self._parse_schema_node(
                    prop_schema, f"{path}/patternProperties/{escape_pointer_token(pattern)}", node
                )

    def _parse_array_keywords(self, node: SchemaNode, schema: dict[str, Any], path: str) -> None:
        items = schema.get("items")
        if isinstance(items, list):
            node.items = [self._parse_schema_node(s, f"{path}/items/{i}", node) for i, s in enumerate(items)]
        elif isinstance(items, (dict, bool)):
            node.item = self._parse_schema_node(items, f"{path}/items", node)

        additional = schema.get("additionalItems", True)
        if isinstance(additional, bool):
            node.additional_items = additional
        elif isinstance(additional, dict):
            node.additional_items = self._parse_schema_node(additional, f"{path}/additionalItems", node)

    def _parse_combinators(self, node: SchemaNode, schema: dict[str, Any], path: str) -> None:
        for keyword, target in (("allOf", node.all_of), ("anyOf", node.any_of), ("oneOf", node.one_of)):
            entries = schema.get(keyword)
            if isinstance(entries, list):
                target.extend(
                    self._parse_schema_node(s, f"{path}/{keyword}/{i}", node) for i, s in enumerate(entries)
                )
        if "not" in schema:
            node.not_schema = self._parse_schema_node(schema["not"], f"{path}/not", node)


def parse_schema(schema: dict[str, Any]) -> SchemaNode:
    """Parse a decoded document with a fresh SchemaParser."""
    return SchemaParser().parse(schema)
