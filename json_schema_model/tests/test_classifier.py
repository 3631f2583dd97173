import pytest

from json_schema_model.analyzer.analyzer import SchemaAnalyzer
from json_schema_model.analyzer.classifier import TypeClassifier
from json_schema_model.analyzer.flattener import CombinatorFlattener, FlattenMode
from json_schema_model.analyzer.ir_nodes import TypeKind
from json_schema_model.analyzer.reference_resolver import ReferenceResolver
from json_schema_model.errors import GenerationWarning
from json_schema_model.schema_ast import parse_schema


def make_classifier(schema):
    root = parse_schema(schema)
    resolver = ReferenceResolver(root)
    resolver.bind()
    return root, resolver, TypeClassifier(resolver)


@pytest.mark.parametrize(
    "schema, expected",
    [
        ({"type": "string", "enum": ["a", "b"]}, TypeKind.ENUM),
        ({"enum": [1, 2]}, TypeKind.ENUM),
        ({"type": "array", "items": {"type": "string"}}, TypeKind.ARRAY),
        ({"items": {"type": "string"}}, TypeKind.ARRAY),
        ({"type": "object", "properties": {"a": {"type": "string"}}}, TypeKind.OBJECT),
        ({"type": "object"}, TypeKind.OBJECT),
        ({"type": "object", "additionalProperties": {"type": "integer"}}, TypeKind.DICTIONARY),
        ({"type": "object", "patternProperties": {"^x-": {"type": "string"}}}, TypeKind.DICTIONARY),
        ({"additionalProperties": {"type": "integer"}}, TypeKind.DICTIONARY),
        ({"type": "string", "format": "date-time"}, TypeKind.PRIMITIVE),
        ({"type": ["integer", "null"]}, TypeKind.PRIMITIVE),
        ({"type": "boolean"}, TypeKind.PRIMITIVE),
        ({}, TypeKind.ANY),
        ({"type": ["string", "integer"]}, TypeKind.ANY),
        ({"oneOf": [{"type": "string"}, {"type": "integer"}]}, TypeKind.ANY),
    ],
)
def test_classification(schema, expected):
    root, _, classifier = make_classifier(schema)
    assert classifier.classify(root) == expected


def test_enum_wins_over_array_and_object():
    root, _, classifier = make_classifier({"type": "object", "properties": {"a": {}}, "enum": [{"a": 1}]})
    assert classifier.classify(root) == TypeKind.ENUM


def test_reference_is_classified_by_its_target():
    root, _, classifier = make_classifier(
        {"properties": {"tags": {"$ref": "#/definitions/Tags"}}, "definitions": {"Tags": {"type": "array"}}}
    )
    assert classifier.classify(root.properties["tags"]) == TypeKind.ARRAY


@pytest.mark.parametrize(
    "enum, expected",
    [
        (["a", "b"], "string"),
        ([1, 2, 3], "integer"),
        ([1, 2.5], "number"),
        ([None, 1], "integer"),
        ([True, False], "string"),
    ],
)
def test_enum_value_type(enum, expected):
    root, _, classifier = make_classifier({"enum": enum})
    assert classifier.enum_value_type(root) == expected


class TestAllOfFlattening:
    """Inheritance versus merge for allOf"""

    def flatten(self, schema, definition):
        root, resolver, classifier = make_classifier(schema)
        return root, CombinatorFlattener(resolver, classifier).flatten(root.definitions[definition])

    def test_single_object_entry_is_inheritance(self):
        root, flat = self.flatten(
            {
                "definitions": {
                    "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
                    "Dog": {
                        "type": "object",
                        "allOf": [{"$ref": "#/definitions/Pet"}],
                        "properties": {"barks": {"type": "boolean"}},
                        "required": ["barks"],
                    },
                }
            },
            "Dog",
        )
        assert flat.mode == FlattenMode.INHERITANCE
        assert flat.base is root.definitions["Pet"]
        # Inherited properties stay on the base type
        assert list(flat.properties) == ["barks"]
        assert flat.required_names == ["barks"]

    def test_several_entries_are_merged_last_writer_wins(self):
        root, flat = self.flatten(
            {
                "definitions": {
                    "A": {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]},
                    "Both": {
                        "allOf": [
                            {"$ref": "#/definitions/A"},
                            {"properties": {"b": {"type": "integer"}, "a": {"type": "string", "maxLength": 3}}},
                        ],
                        "properties": {"c": {"type": "boolean"}},
                    },
                }
            },
            "Both",
        )
        assert flat.mode == FlattenMode.MERGE
        assert flat.base is None
        assert list(flat.properties) == ["a", "b", "c"]
        assert flat.properties["a"].max_length == 3
        assert flat.required_names == ["a"]
        assert flat.conflicts == []

    def test_conflicting_types_are_reported(self):
        _, flat = self.flatten(
            {
                "definitions": {
                    "Both": {
                        "allOf": [
                            {"properties": {"a": {"type": "string"}}},
                            {"properties": {"a": {"type": "integer"}}},
                        ]
                    }
                }
            },
            "Both",
        )
        assert flat.mode == FlattenMode.MERGE
        assert flat.properties["a"].type_flags.names() == ["integer"]
        assert len(flat.conflicts) == 1

    def test_nested_all_of_is_collected(self):
        _, flat = self.flatten(
            {
                "definitions": {
                    "Inner": {"allOf": [{"properties": {"x": {"type": "string"}}}, {"properties": {"y": {}}}]},
                    "Outer": {"allOf": [{"$ref": "#/definitions/Inner"}, {"properties": {"z": {}}}]},
                }
            },
            "Outer",
        )
        assert list(flat.properties) == ["x", "y", "z"]

    def test_no_all_of(self):
        _, flat = self.flatten({"definitions": {"A": {"properties": {"a": {}}}}}, "A")
        assert flat.mode == FlattenMode.NONE
        assert list(flat.properties) == ["a"]


class TestAllOfDescriptors:
    """allOf as seen by generators"""

    def test_inheritance_sets_base_type(self):
        result = SchemaAnalyzer().analyze(
            {
                "definitions": {
                    "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
                    "Dog": {"allOf": [{"$ref": "#/definitions/Pet"}], "properties": {"barks": {"type": "boolean"}}},
                }
            }
        )
        dog = result.get("Dog")
        assert dog.base_type == "Pet"
        assert [p.json_name for p in dog.properties] == ["barks"]

    def test_inline_base_gets_generated_name(self):
        result = SchemaAnalyzer().analyze(
            {
                "definitions": {
                    "Dog": {
                        "allOf": [{"type": "object", "properties": {"name": {"type": "string"}}}],
                        "properties": {"barks": {"type": "boolean"}},
                    }
                }
            }
        )
        assert result.get("Dog").base_type == "DogBase"
        assert result.get("DogBase").property("name") is not None

    def test_merge_conflicts_become_warnings(self):
        result = SchemaAnalyzer().analyze(
            {
                "definitions": {
                    "Both": {
                        "allOf": [
                            {"properties": {"a": {"type": "string"}}},
                            {"properties": {"a": {"type": "integer"}}},
                        ]
                    }
                }
            }
        )
        both = result.get("Both")
        assert both.base_type is None
        assert both.property("a").type_ref.primitive == "integer"
        assert len(result.warnings) == 1
        assert isinstance(result.warnings[0], GenerationWarning)
        assert result.warnings[0].pointer == "#/definitions/Both"


if __name__ == "__main__":
    pytest.main([__file__])
