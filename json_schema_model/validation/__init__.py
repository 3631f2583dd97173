"""
Validation module.

Checks JSON instances against a resolved schema graph.
"""

from __future__ import annotations

from .errors import ValidationError, ValidationErrorKind
from .rules import RULE_CLASSES, ValidationRule, is_multiple_of, json_equal
from .validator import SchemaValidator

__all__ = [
    "ValidationError",
    "ValidationErrorKind",
    "ValidationRule",
    "RULE_CLASSES",
    "SchemaValidator",
    "is_multiple_of",
    "json_equal",
]
