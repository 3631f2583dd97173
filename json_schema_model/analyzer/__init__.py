"""
Analyzer module.

Contains reference resolution, name resolution, and the IR descriptors.
The classifier, flattener and SchemaAnalyzer depend on the configuration
module and are imported from their own modules.
"""

from __future__ import annotations

from .ir_nodes import (
    DefaultValueDescriptor,
    DefaultValueKind,
    EnumMember,
    GenerationResult,
    PropertyDescriptor,
    RequiredMode,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)
from .name_resolver import (
    DefaultEnumNameGenerator,
    DefaultPropertyNameGenerator,
    DefaultTypeNameGenerator,
    EnumNameGenerator,
    PropertyNameGenerator,
    ReservedNameRegistry,
    TypeNameGenerator,
)
from .reference_resolver import ReferenceResolver

__all__ = [
    "DefaultValueDescriptor",
    "DefaultValueKind",
    "EnumMember",
    "GenerationResult",
    "PropertyDescriptor",
    "RequiredMode",
    "TypeDescriptor",
    "TypeKind",
    "TypeRef",
    "TypeNameGenerator",
    "PropertyNameGenerator",
    "EnumNameGenerator",
    "DefaultTypeNameGenerator",
    "DefaultPropertyNameGenerator",
    "DefaultEnumNameGenerator",
    "ReservedNameRegistry",
    "ReferenceResolver",
]
