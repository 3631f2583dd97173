"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
Backends consume the TypeDescriptors of one generation pass and never look
at the schema graph themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import (
    DefaultValueKind,
    GenerationResult,
    PropertyDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def referenced_names(type_ref: TypeRef | None) -> set[str]:
    """Generated type names a TypeRef mentions, at any depth."""
    if type_ref is None:
        return set()
    names = {type_ref.name} if type_ref.name else set()
    for child in (type_ref.item, type_ref.value, *type_ref.items, *type_ref.alternatives):
        names |= referenced_names(child)
    return names


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Type mapping from schema primitive names to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, generation_comment: str | None = None):
        """
        Initialize the backend.

        Args:
            generation_comment: Comment placed at the top of generated files
        """
        self.generation_comment = generation_comment
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR / self.TEMPLATE_LANG)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{self.FILE_EXTENSION}.jinja2")
        self.suffix_template = self.jinja_env.get_template(f"suffix.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def generate(self, result: GenerationResult) -> str:
        """
        Generate code for every type of a generation pass.

        Args:
            result: The output of SchemaAnalyzer.analyze

        Returns:
            Generated code as a string
        """

    @abstractmethod
    def emit_type(self, descriptor: TypeDescriptor) -> str:
        """Render one object, array, dictionary, primitive or union type."""

    @abstractmethod
    def emit_enum(self, descriptor: TypeDescriptor) -> str:
        """Render one enum type."""

    @abstractmethod
    def emit_property(self, prop: PropertyDescriptor) -> dict[str, Any]:
        """
        Prepare the template context of one property.

        Args:
            prop: The property descriptor

        Returns:
            Dictionary of template variables
        """

    @abstractmethod
    def translate_type(self, type_ref: TypeRef) -> str:
        """
        Translate a TypeRef to a language-specific type string.

        Args:
            type_ref: The type reference

        Returns:
            Language-specific type string
        """

    def order_types(self, types: list[TypeDescriptor]) -> list[TypeDescriptor]:
        """
        Order descriptors so that every type follows the types it needs at definition time.

        A class needs its base type and the types its defaults refer to.
        Aliases (arrays, dictionaries, primitives and unions) need every type
        they mention. Discovery order is kept wherever dependencies allow.
        """
        by_name = {t.name: t for t in types}
        ordered: list[TypeDescriptor] = []
        done: set[str] = set()
        visiting: set[str] = set()

        def visit(descriptor: TypeDescriptor) -> None:
            if descriptor.name in done or descriptor.name in visiting:
                return
            visiting.add(descriptor.name)
            for name in sorted(self._dependencies(descriptor)):
                dependency = by_name.get(name)
                if dependency is not None:
                    visit(dependency)
            visiting.discard(descriptor.name)
            done.add(descriptor.name)
            ordered.append(descriptor)

        for descriptor in types:
            visit(descriptor)
        return ordered

    @staticmethod
    def _dependencies(descriptor: TypeDescriptor) -> set[str]:
        if descriptor.kind == TypeKind.OBJECT:
            names = {descriptor.base_type} if descriptor.base_type else set()
            for prop in descriptor.properties:
                if prop.default.kind == DefaultValueKind.NEW_OBJECT and prop.type_ref.name:
                    names.add(prop.type_ref.name)
                elif prop.default.kind == DefaultValueKind.ENUM_MEMBER and prop.default.enum_type:
                    names.add(prop.default.enum_type)
            return names - {descriptor.name}
        if descriptor.kind == TypeKind.ENUM:
            return set()
        names = referenced_names(descriptor.item_type) | referenced_names(descriptor.dictionary_value_type)
        for alternative in descriptor.alternatives:
            names |= referenced_names(alternative)
        return names - {descriptor.name}
