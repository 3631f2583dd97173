"""
Configuration for schema analysis and code generation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .analyzer.name_resolver import (
    ANONYMOUS_TYPE_NAME,
    DefaultEnumNameGenerator,
    DefaultPropertyNameGenerator,
    DefaultTypeNameGenerator,
    EnumNameGenerator,
    PropertyNameGenerator,
    TypeNameGenerator,
)


class SchemaDialect(str, Enum):
    """Named variant of schema semantics.

    The dialects disagree on nullability, so generators must ask the
    nullability policy rather than inspect type flags.
    """

    JSON_SCHEMA = "jsonschema"
    SWAGGER2 = "swagger2"
    OPENAPI3 = "openapi3"


@dataclass
class GeneratorSettings:
    """Configuration options for a generation pass."""

    # Dialect used for nullability decisions
    dialect: SchemaDialect = SchemaDialect.JSON_SCHEMA

    # Whether raw "default" values become default descriptors
    generate_default_values: bool = True

    # Placeholder for types the schema gives no name to
    anonymous_type_name: str = ANONYMOUS_TYPE_NAME

    # Definitions to leave out of the generated type list
    exclude_definitions: list[str] = field(default_factory=list)

    # Pluggable naming strategies (not serialized)
    type_name_generator: TypeNameGenerator | None = None
    property_name_generator: PropertyNameGenerator = field(default_factory=DefaultPropertyNameGenerator)
    enum_name_generator: EnumNameGenerator = field(default_factory=DefaultEnumNameGenerator)

    def __post_init__(self) -> None:
        if isinstance(self.dialect, str):
            self.dialect = SchemaDialect(self.dialect)
        if self.type_name_generator is None:
            self.type_name_generator = DefaultTypeNameGenerator(self.anonymous_type_name)

    @staticmethod
    def from_dict(d: dict) -> GeneratorSettings:
        """Create settings from a dictionary."""
        settings = GeneratorSettings()
        for k, v in d.items():
            if k == "dialect":
                settings.dialect = SchemaDialect(v)
            elif k == "anonymous_type_name":
                settings.anonymous_type_name = v
                settings.type_name_generator = DefaultTypeNameGenerator(v)
            elif k in ("generate_default_values", "exclude_definitions"):
                setattr(settings, k, v)
        return settings

    def to_dict(self) -> dict:
        """Convert settings to a dictionary."""
        return {
            "dialect": self.dialect.value,
            "generate_default_values": self.generate_default_values,
            "anonymous_type_name": self.anonymous_type_name,
            "exclude_definitions": self.exclude_definitions,
        }
