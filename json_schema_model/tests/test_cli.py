#!/usr/bin/env python3

import json

import pytest
from click.testing import CliRunner

from json_schema_model.cli_utils import reconstruct_command_line
from json_schema_model.json_schema_model import generate, json_schema_model

SCHEMA = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
}


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "person.json"
    path.write_text(json.dumps(SCHEMA))
    return path


def write_instance(tmp_path, instance):
    path = tmp_path / "instance.json"
    path.write_text(json.dumps(instance))
    return path


class TestDescribe:
    def test_describe_uses_file_stem_as_root_name(self, schema_file):
        result = CliRunner().invoke(json_schema_model, ["describe", str(schema_file)])
        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["root_type"] == "Person"
        assert [t["name"] for t in document["types"]] == ["Person"]
        assert document["warnings"] == []

    def test_describe_with_name_and_config(self, schema_file, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"dialect": "swagger2"}))
        result = CliRunner().invoke(
            json_schema_model, ["describe", "--name", "Customer", "--config", str(config), str(schema_file)]
        )
        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["root_type"] == "Customer"
        tags = [p for p in document["types"][0]["properties"] if p["json_name"] == "tags"][0]
        # Optional properties are nullable in Swagger 2, so no empty array default
        assert tags["default"] == {"kind": "none"}

    def test_broken_reference_is_reported(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"properties": {"a": {"$ref": "#/definitions/Missing"}}}))
        result = CliRunner().invoke(json_schema_model, ["describe", str(path)])
        assert result.exit_code == 1
        assert "#/definitions/Missing" in result.output


class TestValidate:
    def test_valid_instance(self, schema_file, tmp_path):
        instance = write_instance(tmp_path, {"name": "Ada", "tags": ["x"]})
        result = CliRunner().invoke(json_schema_model, ["validate", str(schema_file), str(instance)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == []

    def test_invalid_instance(self, schema_file, tmp_path):
        instance = write_instance(tmp_path, {"name": "", "tags": [1]})
        result = CliRunner().invoke(json_schema_model, ["validate", str(schema_file), str(instance)])
        assert result.exit_code == 1
        errors = json.loads(result.stdout)
        assert [(e["path"], e["kind"]) for e in errors] == [("#/name", "min_length"), ("#/tags/0", "type")]
        assert errors[0]["schema_pointer"] == "#/properties/name/minLength"

    def test_dialect_option(self, schema_file, tmp_path):
        instance = write_instance(tmp_path, {"name": "Ada", "tags": None})
        runner = CliRunner()
        json_schema = runner.invoke(json_schema_model, ["validate", str(schema_file), str(instance)])
        swagger = runner.invoke(json_schema_model, ["validate", "-d", "swagger2", str(schema_file), str(instance)])
        assert json_schema.exit_code == 1
        assert swagger.exit_code == 0, swagger.output


class TestGenerate:
    def test_generate_writes_dataclasses(self, schema_file, tmp_path):
        output = tmp_path / "person.py"
        result = CliRunner().invoke(json_schema_model, ["generate", str(schema_file), str(output)])
        assert result.exit_code == 0, result.output

        code = output.read_text()
        assert code.startswith("# Generated by json_schema_model generate person.json person.py\n")
        assert "class Person:\n    name: str\n    tags: list[str] = field(default_factory=list)\n" in code

    def test_generation_comment_keeps_non_default_options(self, schema_file, tmp_path):
        output = tmp_path / "models.py"
        result = CliRunner().invoke(
            json_schema_model, ["generate", "-n", "Member", "-d", "openapi3", str(schema_file), str(output)]
        )
        assert result.exit_code == 0, result.output
        first_line = output.read_text().splitlines()[0]
        assert first_line == "# Generated by json_schema_model generate person.json models.py --name Member --dialect openapi3"


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Without an active Click context the program name is returned"""
        assert reconstruct_command_line(generate) == "json_schema_model"

    def test_reconstruct_command_line_in_context(self, schema_file, tmp_path):
        args = ["--name", "Foo", str(schema_file), str(tmp_path / "out.py")]
        with generate.make_context("generate", args) as ctx:
            with ctx.scope():
                result = reconstruct_command_line(generate)
        assert result == "json_schema_model generate person.json out.py --name Foo"


if __name__ == "__main__":
    pytest.main([__file__])
