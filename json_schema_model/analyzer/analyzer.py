"""
Schema analyzer that turns a resolved schema graph into TypeDescriptors.

One call to analyze() is one generation pass. The pass owns its
reserved-name registry, its warnings and its descriptors; nothing is
cached between passes because naming and dialect settings may change.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any

from ..config import GeneratorSettings
from ..errors import GenerationWarning
from ..schema_ast.nodes import SchemaNode
from ..schema_ast.parser import SchemaParser
from .classifier import TypeClassifier, is_nullable
from .default_values import DefaultValueResolver
from .flattener import CombinatorFlattener, FlattenMode
from .ir_nodes import (
    EnumMember,
    GenerationResult,
    PropertyDescriptor,
    RequiredMode,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)
from .name_resolver import ReservedNameRegistry, nested_type_name_hint, unique_member_name
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

# Schema keywords copied onto PropertyDescriptor.constraints
_CONSTRAINT_KEYWORDS = (
    ("minimum", "minimum"),
    ("maximum", "maximum"),
    ("exclusive_minimum", "exclusiveMinimum"),
    ("exclusive_maximum", "exclusiveMaximum"),
    ("multiple_of", "multipleOf"),
    ("min_length", "minLength"),
    ("max_length", "maxLength"),
    ("pattern", "pattern"),
    ("format", "format"),
    ("min_items", "minItems"),
    ("max_items", "maxItems"),
    ("unique_items", "uniqueItems"),
)


class SchemaAnalyzer:
    """Analyzes a schema graph and builds TypeDescriptors."""

    def __init__(self, settings: GeneratorSettings | None = None):
        """
        Initialize the analyzer.

        Args:
            settings: Dialect, naming strategies and default value options
        """
        self.settings = settings or GeneratorSettings()

    def analyze(
        self,
        schema: SchemaNode | dict[str, Any],
        root_name: str | None = None,
        resolver: ReferenceResolver | None = None,
    ) -> GenerationResult:
        """
        Run one generation pass.

        Args:
            schema: The root SchemaNode, or a decoded JSON document
            root_name: Name hint for the root type (None: use title or the anonymous placeholder)
            resolver: An existing resolver for the graph (its memo tables are a pure cache)

        Returns:
            GenerationResult with descriptors in generation order and warnings

        Raises:
            SchemaReferenceError: If a $ref cannot be resolved
            SchemaCycleError: If a $ref chain never reaches a concrete schema
        """
        root = SchemaParser().parse(schema) if isinstance(schema, dict) else schema
        if resolver is None:
            resolver = ReferenceResolver(root)
            resolver.bind()
        return _GenerationPass(self.settings, resolver, root).run(root_name)


class _GenerationPass:
    """State of one analyze() call."""

    def __init__(self, settings: GeneratorSettings, resolver: ReferenceResolver, root: SchemaNode):
        self.settings = settings
        self.resolver = resolver
        self.root = root
        self.classifier = TypeClassifier(resolver)
        self.flattener = CombinatorFlattener(resolver, self.classifier)
        self.registry = ReservedNameRegistry()
        self.warnings: list[GenerationWarning] = []
        self.defaults = DefaultValueResolver(resolver, settings.generate_default_values, self.warnings)

        self._names: dict[SchemaNode, str] = {}
        self._order: list[SchemaNode] = []
        self._descriptors: dict[SchemaNode, TypeDescriptor] = {}
        self._excluded: set[SchemaNode] = set()
        self._pending: list[SchemaNode] = []
        self._expanding: set[SchemaNode] = set()

    def run(self, root_name: str | None) -> GenerationResult:
        result = GenerationResult(warnings=self.warnings)

        if self.root.has_type_information or not self.root.definitions:
            result.root_type = self._register(self.root, root_name)

        # Definitions claim their own names before any inline type does
        for def_name, definition in self.root.definitions.items():
            if definition.has_reference:
                # Alias of another schema: shares that schema's type
                continue
            self._register(definition, def_name)
            if def_name in self.settings.exclude_definitions:
                self._excluded.add(definition)

        while self._pending:
            node = self._pending.pop(0)
            if node not in self._descriptors:
                self._descriptors[node] = self._build_descriptor(node)

        result.types = [self._descriptors[n] for n in self._order if n not in self._excluded]
        logger.debug("Generated %d types, %d warnings", len(result.types), len(self.warnings))
        return result

    def _register(self, schema: SchemaNode, hint: str | None, enclosing_name: str | None = None) -> str:
        """Name a schema that needs a generated type and queue it for building."""
        name = self._names.get(schema)
        if name is not None:
            return name
        name = self.settings.type_name_generator.generate(schema, hint, self.registry, enclosing_name)
        self._names[schema] = name
        self._order.append(schema)
        if self.classifier.classify_schema(schema) == TypeKind.ENUM:
            # Enums are built at once: property defaults need their members
            self._descriptors[schema] = self._build_enum(schema, name)
        else:
            self._pending.append(schema)
        return name

    def _build_descriptor(self, schema: SchemaNode) -> TypeDescriptor:
        name = self._names[schema]
        kind = self.classifier.classify_schema(schema)
        common: dict[str, Any] = {
            "name": name,
            "schema_pointer": schema.pointer,
            "description": schema.description,
        }

        if kind == TypeKind.OBJECT:
            return self._build_object(schema, name, common)

        if kind == TypeKind.ARRAY:
            array_ref = self._array_ref(schema, None, name, "Item")
            item_type = array_ref.item or TypeRef(alternatives=array_ref.items)
            return TypeDescriptor(kind=kind, item_type=item_type, **common)

        if kind == TypeKind.DICTIONARY:
            value_schema = self.classifier.dictionary_value_schema(schema)
            value_ref = self._type_ref(value_schema, name, "Value") if value_schema else TypeRef()
            return TypeDescriptor(kind=kind, dictionary_value_type=value_ref, **common)

        if kind == TypeKind.PRIMITIVE:
            return TypeDescriptor(kind=kind, value_type=self.classifier.primitive_name(schema), **common)

        combinator, alternatives = self._alternatives(schema, name, "Alternative")
        return TypeDescriptor(kind=TypeKind.ANY, alternatives=alternatives, combinator=combinator, **common)

    def _build_enum(self, schema: SchemaNode, name: str) -> TypeDescriptor:
        used: set[str] = set()
        members = []
        for index, value in enumerate(schema.enumeration):
            explicit = schema.enumeration_names[index] if index < len(schema.enumeration_names) else None
            member_name = self.settings.enum_name_generator.generate(index, explicit, value, schema)
            members.append(EnumMember(name=unique_member_name(member_name, used), value=value))
        return TypeDescriptor(
            kind=TypeKind.ENUM,
            name=name,
            schema_pointer=schema.pointer,
            enum_members=tuple(members),
            value_type=self.classifier.enum_value_type(schema),
            description=schema.description,
        )

    def _build_object(self, schema: SchemaNode, name: str, common: dict[str, Any]) -> TypeDescriptor:
        flat = self.flattener.flatten(schema)
        for conflict in flat.conflicts:
            self.warnings.append(GenerationWarning(schema.pointer, conflict))

        base_type = None
        if flat.mode == FlattenMode.INHERITANCE and flat.base is not None:
            base_type = self._register(flat.base, f"{name}Base")

        used: set[str] = set()
        properties = []
        for json_name, prop in flat.properties.items():
            identifier = self.settings.property_name_generator.generate(prop, json_name)
            identifier = unique_member_name(identifier, used, forbidden=name)
            properties.append(self._build_property(prop, json_name, identifier, name, json_name in flat.required_names))

        return TypeDescriptor(
            kind=TypeKind.OBJECT,
            base_type=base_type,
            properties=tuple(properties),
            discriminator=schema.discriminator,
            is_abstract=bool(schema.extensions.get("x-abstract", False)),
            **common,
        )

    def _build_property(
        self,
        prop: SchemaNode,
        json_name: str,
        identifier: str,
        enclosing_name: str,
        is_required: bool,
    ) -> PropertyDescriptor:
        nullable = is_nullable(prop, is_required, self.settings.dialect)
        type_ref = replace(self._type_ref(prop, enclosing_name, identifier), is_nullable=nullable)
        actual = self.resolver.actual_type_schema(prop)

        enum_type = None
        abstract = False
        if type_ref.kind == TypeKind.ENUM:
            enum_type = self._descriptors.get(actual)
        elif type_ref.kind == TypeKind.OBJECT:
            abstract = bool(actual.extensions.get("x-abstract", False))

        if is_required:
            required_mode = RequiredMode.ALLOW_NULL if nullable else RequiredMode.ALWAYS
        else:
            required_mode = RequiredMode.DEFAULT if nullable else RequiredMode.DISALLOW_NULL

        return PropertyDescriptor(
            name=identifier,
            json_name=json_name,
            type_ref=type_ref,
            is_nullable=nullable,
            is_required=is_required,
            required_mode=required_mode,
            default=self.defaults.resolve(prop, nullable, type_ref, enum_type, abstract),
            description=prop.description or actual.description,
            is_read_only=prop.read_only or actual.read_only,
            constraints=self._constraints(prop, actual),
        )

    def _type_ref(self, node: SchemaNode, enclosing_name: str, property_name: str) -> TypeRef:
        """Resolve the type used for node; inline objects and enums get a generated type."""
        schema = self.resolver.actual_type_schema(node)
        kind = self.classifier.classify_schema(schema)

        if kind in (TypeKind.OBJECT, TypeKind.ENUM):
            hint = nested_type_name_hint(enclosing_name, property_name, self.settings.anonymous_type_name)
            return TypeRef(kind=kind, name=self._register(schema, hint, enclosing_name))

        # Named arrays, dictionaries and primitives come from definitions
        name = self._names.get(schema)
        if schema in self._expanding:
            return TypeRef(kind=kind, name=name)

        self._expanding.add(schema)
        try:
            if kind == TypeKind.ARRAY:
                return self._array_ref(schema, name, enclosing_name, property_name)
            if kind == TypeKind.DICTIONARY:
                value_schema = self.classifier.dictionary_value_schema(schema)
                value = self._type_ref(value_schema, enclosing_name, property_name) if value_schema else TypeRef()
                return TypeRef(kind=kind, name=name, value=value)
            if kind == TypeKind.PRIMITIVE:
                return TypeRef(
                    kind=kind,
                    name=name,
                    primitive=self.classifier.primitive_name(schema),
                    format=schema.format,
                )
            _, alternatives = self._alternatives(schema, enclosing_name, property_name)
            return TypeRef(kind=TypeKind.ANY, name=name, alternatives=alternatives)
        finally:
            self._expanding.discard(schema)

    def _array_ref(self, schema: SchemaNode, name: str | None, enclosing_name: str, property_name: str) -> TypeRef:
        if schema.items:
            items = tuple(self._item_ref(i, enclosing_name, property_name) for i in schema.items)
            return TypeRef(kind=TypeKind.ARRAY, name=name, items=items)
        return TypeRef(kind=TypeKind.ARRAY, name=name, item=self._array_item_ref(schema, enclosing_name, property_name))

    def _array_item_ref(self, schema: SchemaNode, enclosing_name: str, property_name: str) -> TypeRef:
        if schema.item is None:
            # No items keyword: an array of anything
            return TypeRef()
        return self._item_ref(schema.item, enclosing_name, property_name)

    def _item_ref(self, item: SchemaNode, enclosing_name: str, property_name: str) -> TypeRef:
        ref = self._type_ref(item, enclosing_name, property_name)
        # Items are always in a "required" position
        return replace(ref, is_nullable=is_nullable(item, True, self.settings.dialect))

    def _alternatives(
        self, schema: SchemaNode, enclosing_name: str, property_name: str
    ) -> tuple[str | None, tuple[TypeRef, ...]]:
        """anyOf/oneOf alternatives, reported alongside the weakly typed ANY."""
        for combinator, entries in (("oneOf", schema.one_of), ("anyOf", schema.any_of)):
            if entries:
                return combinator, tuple(self._type_ref(e, enclosing_name, property_name) for e in entries)
        return None, ()

    def _constraints(self, prop: SchemaNode, actual: SchemaNode) -> dict[str, Any]:
        constraints: dict[str, Any] = {}
        for source in (actual, prop):
            for attribute, keyword in _CONSTRAINT_KEYWORDS:
                value = getattr(source, attribute)
                if value is not None and value is not False:
                    constraints[keyword] = value

        pattern = constraints.get("pattern")
        if pattern is not None:
            try:
                re.compile(pattern)
            except re.error as e:
                message = f"Invalid pattern {pattern!r}: {e}"
                logger.warning("%s (%s)", message, prop.pointer)
                self.warnings.append(GenerationWarning(prop.pointer, message))
                del constraints["pattern"]
        return constraints
