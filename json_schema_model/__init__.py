"""JSON Schema type model

A Python package that resolves JSON Schema documents (draft-04 family,
Swagger 2 and OpenAPI 3 dialects) into a language-agnostic type model for
code generators, and validates JSON instances against the same schemas.
"""

__version__ = "1.0.1"
__author__ = "François Lagunas"

from .analyzer.analyzer import SchemaAnalyzer
from .analyzer.ir_nodes import GenerationResult, PropertyDescriptor, TypeDescriptor, TypeKind
from .analyzer.reference_resolver import ReferenceResolver
from .backends import CodeBackend, PythonDataclassBackend
from .config import GeneratorSettings, SchemaDialect
from .errors import (
    GenerationWarning,
    NameCollisionError,
    SchemaCycleError,
    SchemaModelError,
    SchemaParseError,
    SchemaReferenceError,
)
from .schema_ast import SchemaNode, parse_schema
from .validation import SchemaValidator, ValidationError, ValidationErrorKind

__all__ = [
    "SchemaAnalyzer",
    "GeneratorSettings",
    "SchemaDialect",
    "GenerationResult",
    "TypeDescriptor",
    "PropertyDescriptor",
    "TypeKind",
    "ReferenceResolver",
    "SchemaNode",
    "parse_schema",
    "SchemaValidator",
    "ValidationError",
    "ValidationErrorKind",
    "CodeBackend",
    "PythonDataclassBackend",
    "GenerationWarning",
    "SchemaModelError",
    "SchemaParseError",
    "SchemaReferenceError",
    "SchemaCycleError",
    "NameCollisionError",
]
