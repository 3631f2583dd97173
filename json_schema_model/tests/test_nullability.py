import pytest

from json_schema_model.analyzer.analyzer import SchemaAnalyzer
from json_schema_model.analyzer.classifier import has_null_type, is_nullable
from json_schema_model.analyzer.ir_nodes import RequiredMode
from json_schema_model.config import GeneratorSettings, SchemaDialect
from json_schema_model.schema_ast import parse_schema

JSON_SCHEMA = SchemaDialect.JSON_SCHEMA
SWAGGER2 = SchemaDialect.SWAGGER2
OPENAPI3 = SchemaDialect.OPENAPI3


@pytest.mark.parametrize(
    "schema, required, dialect, expected",
    [
        # JSON Schema: only the null type (or an explicit marker) makes a property nullable
        ({"type": "string"}, False, JSON_SCHEMA, False),
        ({"type": "string"}, True, JSON_SCHEMA, False),
        ({"type": ["string", "null"]}, True, JSON_SCHEMA, True),
        ({"oneOf": [{"type": "null"}, {"type": "string"}]}, False, JSON_SCHEMA, True),
        ({"type": "string", "x-nullable": True}, False, JSON_SCHEMA, True),
        # OpenAPI 3 nullable is not a JSON Schema keyword
        ({"type": "string", "nullable": True}, True, JSON_SCHEMA, False),
        ({"type": "string", "nullable": True}, False, JSON_SCHEMA, False),
        # Swagger 2: required is never nullable, optional is nullable unless x-nullable is false
        ({"type": "string"}, True, SWAGGER2, False),
        ({"type": "string", "x-nullable": True}, True, SWAGGER2, False),
        ({"type": "string"}, False, SWAGGER2, True),
        ({"type": "string", "x-nullable": False}, False, SWAGGER2, False),
        ({"type": "string", "nullable": True}, True, SWAGGER2, False),
        # OpenAPI 3: explicit nullable wins, then the null type, then optionality
        ({"type": "string", "nullable": True}, True, OPENAPI3, True),
        ({"type": "string", "nullable": False}, False, OPENAPI3, False),
        ({"type": ["string", "null"]}, True, OPENAPI3, True),
        ({"type": "string"}, True, OPENAPI3, False),
        ({"type": "string"}, False, OPENAPI3, True),
    ],
)
def test_is_nullable(schema, required, dialect, expected):
    node = parse_schema(schema)
    assert is_nullable(node, required, dialect) is expected


def test_null_type_through_reference():
    root = parse_schema(
        {"properties": {"a": {"$ref": "#/definitions/N"}}, "definitions": {"N": {"type": ["integer", "null"]}}}
    )
    prop = root.properties["a"]
    prop.reference = root.definitions["N"]
    assert has_null_type(prop)


class TestRequiredNullableProperties:
    """The same schema under the three dialects"""

    SCHEMA = {
        "type": "object",
        "required": ["name", "nickname"],
        "properties": {
            "name": {"type": "string"},
            "nickname": {"type": ["string", "null"]},
            "age": {"type": "integer"},
        },
    }

    def analyze(self, dialect):
        result = SchemaAnalyzer(GeneratorSettings(dialect=dialect)).analyze(self.SCHEMA, "Person")
        return result.get("Person")

    def test_json_schema(self):
        person = self.analyze(JSON_SCHEMA)
        assert person.property("name").required_mode == RequiredMode.ALWAYS
        assert person.property("nickname").required_mode == RequiredMode.ALLOW_NULL
        assert person.property("age").required_mode == RequiredMode.DISALLOW_NULL
        assert person.property("nickname").type_ref.is_nullable

    def test_swagger2(self):
        person = self.analyze(SWAGGER2)
        assert person.property("name").is_nullable is False
        assert person.property("age").is_nullable is True
        assert person.property("age").required_mode == RequiredMode.DEFAULT

    def test_openapi3(self):
        person = self.analyze(OPENAPI3)
        assert person.property("name").is_nullable is False
        assert person.property("nickname").is_nullable is True
        assert person.property("age").is_nullable is True


if __name__ == "__main__":
    pytest.main([__file__])
