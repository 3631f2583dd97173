"""
allOf flattening.

Decides whether an allOf expresses inheritance (one object entry: the node
derives from it) or a merge (every entry's properties folded into one
object without base type). anyOf and oneOf are left untouched: no single
generated type can represent them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..schema_ast.nodes import JsonObjectType, SchemaNode
from .classifier import TypeClassifier
from .ir_nodes import TypeKind
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)


class FlattenMode(Enum):
    NONE = "none"  # No allOf
    INHERITANCE = "inheritance"
    MERGE = "merge"


@dataclass
class FlattenResult:
    """Own properties of a node once its allOf has been interpreted."""

    mode: FlattenMode = FlattenMode.NONE
    base: SchemaNode | None = None  # Actual schema of the base type (inheritance only)
    properties: dict[str, SchemaNode] = field(default_factory=dict)
    required_names: list[str] = field(default_factory=list)
    # Human readable descriptions of merged properties whose types disagree
    conflicts: list[str] = field(default_factory=list)


class CombinatorFlattener:
    """Resolves allOf into inheritance or merged properties."""

    def __init__(self, resolver: ReferenceResolver, classifier: TypeClassifier):
        self.resolver = resolver
        self.classifier = classifier

    def flatten(self, node: SchemaNode) -> FlattenResult:
        """
        Interpret the allOf of a node.

        Args:
            node: The (actual) schema of a generated object type

        Returns:
            FlattenResult; for inheritance, properties holds only the node's
            own properties, never the inherited ones
        """
        if not node.all_of:
            return FlattenResult(
                mode=FlattenMode.NONE,
                properties=dict(node.properties),
                required_names=list(node.required_names),
            )

        if len(node.all_of) == 1:
            entry = node.all_of[0]
            if self.classifier.classify(entry) == TypeKind.OBJECT:
                return FlattenResult(
                    mode=FlattenMode.INHERITANCE,
                    base=self.resolver.actual_type_schema(entry),
                    properties=dict(node.properties),
                    required_names=list(node.required_names),
                )

        return self._merge(node)

    def _merge(self, node: SchemaNode) -> FlattenResult:
        result = FlattenResult(mode=FlattenMode.MERGE)
        seen: set[SchemaNode] = {node}
        for entry in node.all_of:
            self._collect(entry, result, seen)
        # The node's own keywords are written last
        self._add_properties(node, result)
        return result

    def _collect(self, entry: SchemaNode, result: FlattenResult, seen: set[SchemaNode]) -> None:
        schema = self.resolver.resolve(entry)
        if schema in seen:
            return
        seen.add(schema)
        for sub_entry in schema.all_of:
            self._collect(sub_entry, result, seen)
        self._add_properties(schema, result)

    def _add_properties(self, schema: SchemaNode, result: FlattenResult) -> None:
        for name, prop in schema.properties.items():
            previous = result.properties.get(name)
            if previous is not None:
                old_flags = self._flags(previous)
                new_flags = self._flags(prop)
                if old_flags and new_flags and old_flags != new_flags:
                    message = (
                        f"Property '{name}' merged from {prop.pointer} has type "
                        f"{new_flags.names()} but an earlier allOf entry declares {old_flags.names()}"
                    )
                    logger.warning(message)
                    result.conflicts.append(message)
            result.properties[name] = prop
        for name in schema.required_names:
            if name not in result.required_names:
                result.required_names.append(name)

    def _flags(self, node: SchemaNode) -> JsonObjectType:
        return self.resolver.actual_type_schema(node).type_flags & ~JsonObjectType.NULL
