"""
Schema AST module.

Contains the SchemaNode definition and the parser for JSON Schema.
"""

from __future__ import annotations

from .nodes import PRIMITIVE_TYPES, JsonObjectType, SchemaNode
from .parser import SchemaParser, escape_pointer_token, parse_schema

__all__ = [
    "JsonObjectType",
    "PRIMITIVE_TYPES",
    "SchemaNode",
    "SchemaParser",
    "escape_pointer_token",
    "parse_schema",
]
