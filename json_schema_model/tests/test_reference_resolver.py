import pytest

from json_schema_model.analyzer.analyzer import SchemaAnalyzer
from json_schema_model.analyzer.ir_nodes import TypeKind
from json_schema_model.analyzer.reference_resolver import ReferenceResolver
from json_schema_model.errors import SchemaCycleError, SchemaReferenceError
from json_schema_model.schema_ast import parse_schema


def bound_resolver(schema):
    root = parse_schema(schema)
    resolver = ReferenceResolver(root)
    resolver.bind()
    return root, resolver


class TestReferenceResolution:
    """Reference chains, cycles and missing targets"""

    def test_chain_resolves_to_terminal_node(self):
        root, resolver = bound_resolver(
            {
                "definitions": {
                    "A": {"$ref": "#/definitions/B"},
                    "B": {"$ref": "#/definitions/C"},
                    "C": {"type": "string"},
                }
            }
        )
        assert resolver.resolve(root.definitions["A"]) is root.definitions["C"]
        assert resolver.resolve(root.definitions["B"]) is root.definitions["C"]

    def test_resolution_is_idempotent(self):
        root, resolver = bound_resolver(
            {"definitions": {"A": {"$ref": "#/definitions/B"}, "B": {"type": "integer"}}}
        )
        first = resolver.actual_schema(root.definitions["A"])
        second = resolver.actual_schema(root.definitions["A"])
        assert first is second
        assert resolver.resolve(first) is first

    def test_node_without_reference_is_its_own_actual_schema(self):
        root, resolver = bound_resolver({"type": "object"})
        assert resolver.resolve(root) is root

    def test_reference_only_cycle_raises(self):
        root, resolver = bound_resolver(
            {"definitions": {"A": {"$ref": "#/definitions/B"}, "B": {"$ref": "#/definitions/A"}}}
        )
        with pytest.raises(SchemaCycleError) as exc_info:
            resolver.resolve(root.definitions["A"])
        assert exc_info.value.pointer == "#/definitions/A"

    def test_self_reference_raises(self):
        root, resolver = bound_resolver({"definitions": {"A": {"$ref": "#/definitions/A"}}})
        with pytest.raises(SchemaCycleError):
            resolver.resolve(root.definitions["A"])

    def test_missing_reference_raises_with_pointer(self):
        root = parse_schema({"properties": {"x": {"$ref": "#/definitions/Missing"}}})
        resolver = ReferenceResolver(root)
        with pytest.raises(SchemaReferenceError) as exc_info:
            resolver.bind()
        assert exc_info.value.pointer == "#/properties/x"
        assert exc_info.value.reference == "#/definitions/Missing"

    def test_missing_reference_is_fatal_for_analysis(self):
        with pytest.raises(SchemaReferenceError):
            SchemaAnalyzer().analyze({"properties": {"x": {"$ref": "#/definitions/Missing"}}}, "Root")

    def test_unregistered_document_raises(self):
        root = parse_schema({"properties": {"x": {"$ref": "other.json#/definitions/Pet"}}})
        with pytest.raises(SchemaReferenceError):
            ReferenceResolver(root).bind()

    def test_defs_and_definitions_are_interchangeable(self):
        root, resolver = bound_resolver(
            {"properties": {"x": {"$ref": "#/$defs/Pet"}}, "definitions": {"Pet": {"type": "object"}}}
        )
        assert resolver.resolve(root.properties["x"]) is root.definitions["Pet"]

    def test_escaped_pointer_tokens(self):
        root, resolver = bound_resolver(
            {"properties": {"x": {"$ref": "#/definitions/a~1b"}}, "definitions": {"a/b": {"type": "string"}}}
        )
        assert resolver.resolve(root.properties["x"]) is root.definitions["a/b"]

    def test_external_document(self):
        root = parse_schema({"properties": {"pet": {"$ref": "other.json#/definitions/Pet"}}})
        other = parse_schema({"definitions": {"Pet": {"type": "object", "properties": {"name": {"type": "string"}}}}})
        resolver = ReferenceResolver(root)
        resolver.add_document("other.json", other)
        resolver.bind()
        assert resolver.resolve(root.properties["pet"]) is other.definitions["Pet"]

        result = SchemaAnalyzer().analyze(root, "Owner", resolver=resolver)
        pet = result.get("Owner").property("pet")
        assert pet.kind == TypeKind.OBJECT
        assert result.get(pet.type_ref.name).property("name") is not None


class TestActualTypeSchema:
    """Unwrapping of reference-only combinators"""

    def test_single_all_of_reference_is_unwrapped(self):
        root, resolver = bound_resolver(
            {
                "properties": {"pet": {"allOf": [{"$ref": "#/definitions/Pet"}], "description": "The pet"}},
                "definitions": {"Pet": {"type": "object"}},
            }
        )
        assert resolver.actual_type_schema(root.properties["pet"]) is root.definitions["Pet"]

    def test_nullable_one_of_reference_is_unwrapped(self):
        root, resolver = bound_resolver(
            {
                "properties": {"pet": {"oneOf": [{"type": "null"}, {"$ref": "#/definitions/Pet"}]}},
                "definitions": {"Pet": {"type": "object"}},
            }
        )
        assert resolver.actual_type_schema(root.properties["pet"]) is root.definitions["Pet"]

    def test_real_union_is_kept(self):
        root, resolver = bound_resolver(
            {
                "properties": {"value": {"oneOf": [{"$ref": "#/definitions/Pet"}, {"type": "string"}]}},
                "definitions": {"Pet": {"type": "object"}},
            }
        )
        assert resolver.actual_type_schema(root.properties["value"]) is root.properties["value"]

    def test_named_definition_wrapper_is_kept(self):
        root, resolver = bound_resolver(
            {
                "definitions": {
                    "Base": {"type": "object", "properties": {"id": {"type": "integer"}}},
                    "Derived": {"allOf": [{"$ref": "#/definitions/Base"}]},
                }
            }
        )
        derived = root.definitions["Derived"]
        assert resolver.actual_type_schema(derived) is derived


class TestContainerCycles:
    """Types that contain themselves through arrays or properties"""

    SCHEMA = {
        "definitions": {
            "Node": {
                "type": "object",
                "properties": {
                    "children": {"type": "array", "items": {"$ref": "#/definitions/Node"}},
                    "parent": {"$ref": "#/definitions/Node"},
                },
            }
        }
    }

    def test_recursive_type_is_generated_once(self):
        result = SchemaAnalyzer().analyze(self.SCHEMA)
        assert [t.name for t in result.types] == ["Node"]

        node = result.get("Node")
        children = node.property("children")
        assert children.kind == TypeKind.ARRAY
        assert children.type_ref.item.name == "Node"
        assert node.property("parent").type_ref.name == "Node"

    def test_reference_to_reference_definition(self):
        schema = {
            "x-typeName": "foo",
            "type": "object",
            "definitions": {
                "pRef": {"type": "object", "properties": {"pRef2": {"$ref": "#/definitions/pRef2"}}},
                "pRef2": {"type": "string"},
            },
            "properties": {"pRefs": {"type": "array", "items": {"$ref": "#/definitions/pRef"}}},
        }
        result = SchemaAnalyzer().analyze(schema, "MyClass")

        assert result.root_type == "Foo"
        p_refs = result.get("Foo").property("pRefs")
        assert p_refs.type_ref.item.kind == TypeKind.OBJECT
        assert p_refs.type_ref.item.name == "PRef"
        assert result.get("PRef").property("pRef2").type_ref.primitive == "string"


if __name__ == "__main__":
    pytest.main([__file__])
