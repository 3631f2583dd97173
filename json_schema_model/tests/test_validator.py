import json
from pathlib import Path

import pytest

from json_schema_model.config import SchemaDialect
from json_schema_model.errors import SchemaCycleError, SchemaReferenceError
from json_schema_model.schema_ast import parse_schema
from json_schema_model.validation import (
    SchemaValidator,
    ValidationErrorKind,
    ValidationRule,
    is_multiple_of,
    json_equal,
)


def load_test_data():
    """Load test cases from JSON file"""
    test_data_path = Path(__file__).parent / "test_data" / "validation_tests.json"
    with open(test_data_path) as f:
        return json.load(f)


@pytest.mark.parametrize("test_case", load_test_data(), ids=lambda case: case["name"])
def test_validation(test_case):
    """Test the errors reported for one instance"""
    dialect = SchemaDialect(test_case.get("dialect", "jsonschema"))
    errors = SchemaValidator(test_case["schema"], dialect=dialect).validate(test_case["instance"])
    actual = [{"path": e.instance_path, "kind": e.kind.value} for e in errors]
    assert actual == test_case["expected"], [str(e) for e in errors]


class TestMultipleOf:
    """Decimal-safe divisibility"""

    def test_tenths_are_multiples_of_one_tenth(self):
        validator = SchemaValidator({"type": "number", "multipleOf": 0.1})
        for i in range(100):
            value = 0.1 * i
            assert validator.validate(value) == [], value

    def test_naive_modulo_would_fail(self):
        # 0.3 % 0.1 is 0.09999999999999998 in binary floating point
        assert 0.3 % 0.1 != 0
        assert is_multiple_of(0.3, 0.1)

    @pytest.mark.parametrize(
        "value, divisor, expected",
        [
            (10, 5, True),
            (10, 3, False),
            (10, 0.5, True),
            (1.5, 0.5, True),
            (1.25, 0.5, False),
            (0.0075, 0.0001, True),
            (4.02, 0.01, True),
            (7.5, 2, False),
            (3, 0, True),
            (1e16, 0.3, False),
            (1e20, 0.3, False),
            (1e16, 0.5, True),
            (0.1 * 7, 0.1, True),
            (0.1 * 7 + 1e-9, 0.1, False),
            (float("inf"), 0.5, False),
        ],
    )
    def test_is_multiple_of(self, value, divisor, expected):
        assert is_multiple_of(value, divisor) is expected


def test_json_equal():
    assert json_equal(1, 1.0)
    assert not json_equal(1, True)
    assert not json_equal(0, False)
    assert json_equal({"a": [1, {"b": None}]}, {"a": [1.0, {"b": None}]})
    assert not json_equal([1, 2], [2, 1])
    assert not json_equal("1", 1)


class TestErrors:
    def test_error_record(self):
        errors = SchemaValidator({"type": "object", "required": ["name"]}).validate({})
        assert len(errors) == 1
        error = errors[0]
        assert error.kind == ValidationErrorKind.REQUIRED
        assert error.schema_pointer == "#/required"
        assert error.to_dict() == {
            "path": "#",
            "message": "Required property name is missing",
            "kind": "required",
            "schema_pointer": "#/required",
        }
        assert str(error) == "#: Required property name is missing"

    def test_schema_pointer_of_nested_keyword(self):
        errors = SchemaValidator({"properties": {"age": {"minimum": 0}}}).validate({"age": -1})
        assert errors[0].schema_pointer == "#/properties/age/minimum"
        assert errors[0].message == "Value -1 must be >= 0"

    def test_multiple_keywords_on_one_node_are_all_reported(self):
        errors = SchemaValidator({"type": "string", "minLength": 5, "pattern": "^[a-z]+$"}).validate("AB")
        assert [e.kind for e in errors] == [ValidationErrorKind.MIN_LENGTH, ValidationErrorKind.PATTERN]

    def test_one_of_message_names_matching_alternatives(self):
        errors = SchemaValidator({"oneOf": [{"type": "integer"}, {"minimum": 0}, {"type": "string"}]}).validate(2)
        assert errors[0].message == "Value matches 2 of the oneOf alternatives (0, 1), exactly one is allowed"

    def test_message_templates_are_loaded_once(self):
        message = ValidationRule.get_message("_structural", "not")
        assert message == "Value must not match the schema in not"
        assert "TypeRule" in ValidationRule._string_templates


class TestValidatorSetup:
    def test_parsed_node_and_explicit_schema(self):
        root = parse_schema({"definitions": {"Positive": {"minimum": 0}}})
        validator = SchemaValidator(root)
        assert validator.is_valid(-1)
        assert not validator.is_valid(-1, root.definitions["Positive"])

    def test_validator_is_reusable(self):
        validator = SchemaValidator({"type": "integer"})
        assert not validator.is_valid("a")
        assert validator.is_valid(1)
        assert not validator.is_valid("a")

    def test_missing_reference_is_fatal(self):
        with pytest.raises(SchemaReferenceError):
            SchemaValidator({"properties": {"a": {"$ref": "#/definitions/Missing"}}})

    def test_reference_cycle_is_fatal(self):
        validator = SchemaValidator({"$ref": "#/definitions/A", "definitions": {"A": {"$ref": "#"}}})
        with pytest.raises(SchemaCycleError):
            validator.validate(1)


if __name__ == "__main__":
    pytest.main([__file__])
