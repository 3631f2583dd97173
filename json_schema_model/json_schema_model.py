import json
import logging
from pathlib import Path

import click

from .analyzer.analyzer import SchemaAnalyzer
from .backends import PythonDataclassBackend
from .cli_utils import reconstruct_command_line
from .config import GeneratorSettings, SchemaDialect
from .errors import SchemaModelError
from .validation import SchemaValidator

logger = logging.getLogger(__name__)

DIALECTS = click.Choice([d.value for d in SchemaDialect])


def load_json(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_settings(config, dialect):
    if config is not None:
        settings = GeneratorSettings.from_dict(load_json(config))
    else:
        settings = GeneratorSettings()
    # CLI flag overrides the config file
    if dialect is not None:
        settings.dialect = SchemaDialect(dialect)
    return settings


def analyze(path, name, settings):
    if name is None:
        name = Path(path).stem
    try:
        return SchemaAnalyzer(settings).analyze(load_json(path), name)
    except SchemaModelError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log analysis progress")
def json_schema_model(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@json_schema_model.command()
@click.option("--name", "-n", default=None, type=str)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--dialect", "-d", default=None, type=DIALECTS)
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
def describe(name, config, dialect, path):
    """Print the type descriptors of a schema as JSON."""
    result = analyze(path, name, load_settings(config, dialect))
    for warning in result.warnings:
        logger.warning("%s: %s", warning.pointer, warning.message)
    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@json_schema_model.command()
@click.option("--dialect", "-d", default=SchemaDialect.JSON_SCHEMA.value, type=DIALECTS)
@click.argument("schema", type=click.Path(exists=True, resolve_path=True))
@click.argument("instance", type=click.Path(exists=True, resolve_path=True))
def validate(dialect, schema, instance):
    """Validate a JSON instance; exits with status 1 when it is invalid."""
    try:
        validator = SchemaValidator(load_json(schema), dialect=SchemaDialect(dialect))
        errors = validator.validate(load_json(instance))
    except SchemaModelError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps([error.to_dict() for error in errors], indent=2, ensure_ascii=False))
    if errors:
        raise SystemExit(1)


@json_schema_model.command()
@click.option("--name", "-n", default=None, type=str)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--dialect", "-d", default=None, type=DIALECTS)
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", type=click.Path(resolve_path=True))
def generate(name, config, dialect, path, output):
    """Generate Python dataclasses for a schema."""
    result = analyze(path, name, load_settings(config, dialect))
    for warning in result.warnings:
        logger.warning("%s: %s", warning.pointer, warning.message)

    backend = PythonDataclassBackend(f"Generated by {reconstruct_command_line(generate)}")
    out = backend.generate(result)
    with open(output, "w", encoding="utf-8") as f:
        f.write(out)
