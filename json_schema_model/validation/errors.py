"""
Validation error records.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationErrorKind(str, Enum):
    """The keyword (or keyword outcome) a validation error is about."""

    TYPE = "type"
    ENUM = "enum"
    CONST = "const"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    EXCLUSIVE_MINIMUM = "exclusive_minimum"
    EXCLUSIVE_MAXIMUM = "exclusive_maximum"
    MULTIPLE_OF = "multiple_of"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    PATTERN = "pattern"
    INVALID_PATTERN = "invalid_pattern"
    FORMAT = "format"
    MIN_ITEMS = "min_items"
    MAX_ITEMS = "max_items"
    UNIQUE_ITEMS = "unique_items"
    ADDITIONAL_ITEMS = "additional_items"
    REQUIRED = "required"
    ADDITIONAL_PROPERTIES = "additional_properties"
    MIN_PROPERTIES = "min_properties"
    MAX_PROPERTIES = "max_properties"
    ANY_OF = "any_of"
    ONE_OF_NO_MATCH = "one_of_no_match"
    ONE_OF_MULTIPLE_MATCHES = "one_of_multiple_matches"
    NOT = "not"


@dataclass(frozen=True)
class ValidationError:
    """One violated keyword on one instance location."""

    schema_pointer: str
    instance_path: str
    kind: ValidationErrorKind
    message: str

    def to_dict(self) -> dict:
        return {
            "path": self.instance_path,
            "message": self.message,
            "kind": self.kind.value,
            "schema_pointer": self.schema_pointer,
        }

    def __str__(self) -> str:
        return f"{self.instance_path}: {self.message}"
