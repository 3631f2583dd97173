"""
Instance validation against a resolved schema graph.

The validator walks the schema and the instance together and collects every
violated keyword instead of stopping at the first one. Reference and cycle
errors are fatal and propagate; everything else is reported as data.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ..analyzer.classifier import is_nullable
from ..analyzer.reference_resolver import ReferenceResolver
from ..config import SchemaDialect
from ..schema_ast.nodes import SchemaNode
from ..schema_ast.parser import escape_pointer_token, parse_schema
from .errors import ValidationError, ValidationErrorKind
from .rules import ValidationRule, rules_for_node

logger = logging.getLogger(__name__)

ROOT_PATH = "#"


class SchemaValidator:
    """Validates JSON instances against one schema document."""

    def __init__(
        self,
        schema: SchemaNode | dict[str, Any] | bool,
        dialect: SchemaDialect = SchemaDialect.JSON_SCHEMA,
        resolver: ReferenceResolver | None = None,
    ):
        """
        Initialize the validator.

        Args:
            schema: A parsed root node or the raw schema document
            dialect: Decides which properties accept null values
            resolver: An existing resolver for the document, e.g. one with
                external documents registered

        Raises:
            SchemaReferenceError: If a $ref of the document cannot be found
        """
        if not isinstance(schema, SchemaNode):
            schema = parse_schema(schema)
        self.root = schema
        self.dialect = SchemaDialect(dialect)
        self.resolver = resolver or ReferenceResolver(schema)
        self.resolver.bind()
        self._rules: dict[SchemaNode, list[ValidationRule]] = {}
        self._pattern_cache: dict[str, re.Pattern | str] = {}

    def validate(self, instance: Any, schema: SchemaNode | None = None) -> list[ValidationError]:
        """
        Validate an instance.

        Args:
            instance: The decoded JSON value
            schema: Node to validate against; defaults to the document root

        Returns:
            All validation errors in document order, empty if the instance is valid
        """
        errors: list[ValidationError] = []
        self._validate_node(schema or self.root, instance, ROOT_PATH, errors, set())
        logger.debug("Validation finished with %d error(s)", len(errors))
        return errors

    def is_valid(self, instance: Any, schema: SchemaNode | None = None) -> bool:
        return not self.validate(instance, schema)

    def _validate_node(
        self,
        node: SchemaNode,
        instance: Any,
        path: str,
        errors: list[ValidationError],
        active: set[tuple[SchemaNode, str]],
    ) -> None:
        node = self.resolver.resolve(node)
        key = (node, path)
        if key in active:
            # Same schema on the same location again: nothing new to check
            return
        active.add(key)
        try:
            for rule in self._rules_for(node):
                error = rule.validate(instance, path)
                if error is not None:
                    errors.append(error)

            if isinstance(instance, dict):
                self._validate_object(node, instance, path, errors, active)
            elif isinstance(instance, list):
                self._validate_array(node, instance, path, errors, active)

            self._validate_combinators(node, instance, path, errors, active)
        finally:
            active.discard(key)

    def _validate_object(self, node, instance: dict, path: str, errors, active) -> None:
        for name in node.required_names:
            if name not in instance:
                errors.append(
                    self._error(node, "required", path, ValidationErrorKind.REQUIRED, "required", name=name)
                )

        patterns = self._pattern_properties(node, path, errors)
        for name, value in instance.items():
            child_path = f"{path}/{escape_pointer_token(name)}"
            matched = False

            property_schema = node.properties.get(name)
            if property_schema is not None:
                matched = True
                skip = value is None and is_nullable(property_schema, name in node.required_names, self.dialect)
                if not skip:
                    self._validate_node(property_schema, value, child_path, errors, active)

            for regex, pattern_schema in patterns:
                if regex.search(name):
                    matched = True
                    self._validate_node(pattern_schema, value, child_path, errors, active)

            if matched:
                continue
            if node.additional_properties is False:
                errors.append(
                    self._error(
                        node,
                        "additionalProperties",
                        child_path,
                        ValidationErrorKind.ADDITIONAL_PROPERTIES,
                        "additional_properties",
                        name=name,
                    )
                )
            elif isinstance(node.additional_properties, SchemaNode):
                self._validate_node(node.additional_properties, value, child_path, errors, active)

    def _validate_array(self, node, instance: list, path: str, errors, active) -> None:
        if node.items:
            for index, (item_schema, value) in enumerate(zip(node.items, instance)):
                self._validate_node(item_schema, value, f"{path}/{index}", errors, active)

            extra = len(instance) - len(node.items)
            if extra <= 0:
                return
            if node.additional_items is False:
                errors.append(
                    self._error(
                        node,
                        "additionalItems",
                        path,
                        ValidationErrorKind.ADDITIONAL_ITEMS,
                        "additional_items",
                        count=len(node.items),
                    )
                )
            elif isinstance(node.additional_items, SchemaNode):
                for index in range(len(node.items), len(instance)):
                    self._validate_node(node.additional_items, instance[index], f"{path}/{index}", errors, active)
        elif node.item is not None:
            for index, value in enumerate(instance):
                self._validate_node(node.item, value, f"{path}/{index}", errors, active)

    def _validate_combinators(self, node, instance: Any, path: str, errors, active) -> None:
        for entry in node.all_of:
            self._validate_node(entry, instance, path, errors, active)

        if node.any_of:
            if not any(self._matches(entry, instance, path, active) for entry in node.any_of):
                errors.append(
                    self._error(node, "anyOf", path, ValidationErrorKind.ANY_OF, "any_of", count=len(node.any_of))
                )

        if node.one_of:
            matches = [i for i, entry in enumerate(node.one_of) if self._matches(entry, instance, path, active)]
            if not matches:
                errors.append(
                    self._error(
                        node,
                        "oneOf",
                        path,
                        ValidationErrorKind.ONE_OF_NO_MATCH,
                        "one_of_no_match",
                        count=len(node.one_of),
                    )
                )
            elif len(matches) > 1:
                errors.append(
                    self._error(
                        node,
                        "oneOf",
                        path,
                        ValidationErrorKind.ONE_OF_MULTIPLE_MATCHES,
                        "one_of_multiple_matches",
                        matches=len(matches),
                        indexes=", ".join(str(i) for i in matches),
                    )
                )

        if node.not_schema is not None:
            if self._matches(node.not_schema, instance, path, active):
                errors.append(self._error(node, "not", path, ValidationErrorKind.NOT, "not"))

    def _matches(self, node: SchemaNode, instance: Any, path: str, active) -> bool:
        """Run an independent sub-validation and report whether it passed."""
        sub_errors: list[ValidationError] = []
        self._validate_node(node, instance, path, sub_errors, active)
        return not sub_errors

    def _pattern_properties(self, node: SchemaNode, path: str, errors) -> list[tuple[re.Pattern, SchemaNode]]:
        patterns = []
        for pattern, pattern_schema in node.pattern_properties.items():
            regex = self._compile(pattern)
            if isinstance(regex, str):
                errors.append(
                    ValidationError(
                        f"{node.pointer}/patternProperties",
                        path,
                        ValidationErrorKind.INVALID_PATTERN,
                        ValidationRule.get_message("PatternRule", "invalid_pattern_message", pattern=pattern, reason=regex),
                    )
                )
                continue
            patterns.append((regex, pattern_schema))
        return patterns

    def _compile(self, pattern: str) -> re.Pattern | str:
        """Compiled pattern, or the compiler's message if the pattern is invalid."""
        if pattern not in self._pattern_cache:
            try:
                self._pattern_cache[pattern] = re.compile(pattern)
            except re.error as e:
                logger.warning("Invalid pattern %r: %s", pattern, e)
                self._pattern_cache[pattern] = str(e)
        return self._pattern_cache[pattern]

    def _rules_for(self, node: SchemaNode) -> list[ValidationRule]:
        rules = self._rules.get(node)
        if rules is None:
            rules = self._rules[node] = rules_for_node(node, self.dialect)
        return rules

    @staticmethod
    def _error(node: SchemaNode, keyword: str, path: str, kind: ValidationErrorKind, message_key: str, **params):
        message = ValidationRule.get_message("_structural", message_key, **params)
        return ValidationError(f"{node.pointer}/{keyword}", path, kind, message)
