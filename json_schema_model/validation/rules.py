"""
Validation rule objects that check instance values.

Each rule represents one value-level keyword of a schema node and knows how
to check an instance against it. Structural keywords (properties, items and
the combinators) are walked by the SchemaValidator itself.
"""

from __future__ import annotations

import ipaddress
import json
import math
import re
import sys
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, localcontext
from pathlib import Path
from typing import Any, ClassVar
from urllib.parse import urlparse

from ..analyzer.classifier import accepts_null
from ..config import SchemaDialect
from ..schema_ast.nodes import JsonObjectType, SchemaNode
from .errors import ValidationError, ValidationErrorKind

MESSAGES_FILE = Path(__file__).parent / "validation_messages.json"

_DATE_TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})?$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_UUID_PATTERN = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def json_type_of(value: Any) -> JsonObjectType:
    """Map a decoded JSON value to its JSON type flag."""
    if value is None:
        return JsonObjectType.NULL
    if isinstance(value, bool):
        return JsonObjectType.BOOLEAN
    if isinstance(value, int):
        return JsonObjectType.INTEGER
    if isinstance(value, float):
        return JsonObjectType.NUMBER
    if isinstance(value, str):
        return JsonObjectType.STRING
    if isinstance(value, list):
        return JsonObjectType.ARRAY
    if isinstance(value, dict):
        return JsonObjectType.OBJECT
    return JsonObjectType.NONE


def json_equal(left: Any, right: Any) -> bool:
    """Compare two JSON values; booleans never equal numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    return type(left) is type(right) and left == right


def is_multiple_of(value: int | float, divisor: int | float) -> bool:
    """
    Check divisibility without binary floating point division error.

    Both operands are taken at their shortest decimal representation, so
    0.3 / 0.1 is exactly 3. A value whose representation needs more digits
    than a float holds exactly is the result of arithmetic (0.1 * 7 is
    0.7000000000000001); it is accepted when it is the nearest float to an
    exact multiple.
    """
    if divisor == 0:
        return True
    if isinstance(value, int) and isinstance(divisor, int):
        return value % divisor == 0
    for operand in (value, divisor):
        if isinstance(operand, float) and not math.isfinite(operand):
            return False

    exact_value = Decimal(repr(value))
    try:
        with localcontext() as context:
            context.prec = 100
            quotient = exact_value / Decimal(repr(divisor))
            if quotient == quotient.to_integral_value():
                return True
    except InvalidOperation:
        return False

    # Short representations are exact decimals: the verdict above is final
    if not isinstance(value, float) or _significant_digits(exact_value) <= sys.float_info.dig:
        return False
    tolerance = 2 * math.ulp(value)
    if tolerance >= abs(divisor) / 2:
        return False
    nearest = round(value / divisor)
    return abs(nearest * divisor - value) <= tolerance


def _significant_digits(number: Decimal) -> int:
    return len(number.normalize().as_tuple().digits)


def _show(value: Any) -> str:
    text = json.dumps(value, ensure_ascii=False, default=str)
    return text if len(text) <= 80 else text[:77] + "..."


class ValidationRule(ABC):
    """Base class for all validation rules"""

    # Class-level cache for loaded message templates
    _string_templates: ClassVar[dict[str, dict[str, Any]]] = {}

    keyword: ClassVar[str] = ""
    kind: ClassVar[ValidationErrorKind]

    def __init__(self, node: SchemaNode, dialect: SchemaDialect = SchemaDialect.JSON_SCHEMA):
        """
        Initialize a validation rule.

        Args:
            node: The schema node carrying the keyword
            dialect: Decides which nodes accept null values
        """
        self.node = node
        self.dialect = dialect

    @classmethod
    def _load_string_templates(cls) -> dict[str, Any]:
        """Load message templates, cached after the first read."""
        if not cls._string_templates:
            with open(MESSAGES_FILE, "r", encoding="utf-8") as f:
                ValidationRule._string_templates.update(json.load(f))
        return cls._string_templates

    @classmethod
    def get_message(cls, section: str, key: str, **format_params) -> str:
        templates = cls._load_string_templates()
        if section not in templates:
            raise KeyError(f"No message templates found for {section}")
        if key not in templates[section]:
            raise KeyError(f"Key '{key}' not found in message templates for {section}")
        return templates[section][key].format(**format_params)

    def get_string(self, key: str, **format_params) -> str:
        return self.get_message(self.__class__.__name__, key, **format_params)

    @classmethod
    @abstractmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        """Build the rule if the node carries its keyword."""

    def applies_to(self, instance: Any) -> bool:
        """Whether the keyword constrains this kind of instance."""
        return True

    @abstractmethod
    def check(self, instance: Any) -> str | None:
        """Return the error message, or None if the instance passes."""

    def error_kind(self) -> ValidationErrorKind:
        return self.kind

    @property
    def schema_pointer(self) -> str:
        return f"{self.node.pointer}/{self.keyword}"

    def validate(self, instance: Any, instance_path: str) -> ValidationError | None:
        if not self.applies_to(instance):
            return None
        message = self.check(instance)
        if message is None:
            return None
        return ValidationError(self.schema_pointer, instance_path, self.error_kind(), message)


class TypeRule(ValidationRule):
    keyword = "type"
    kind = ValidationErrorKind.TYPE

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.type_flags != JsonObjectType.NONE else None

    def accepts(self, instance: Any) -> bool:
        flags = self.node.type_flags
        actual = json_type_of(instance)
        if actual == JsonObjectType.NULL:
            return accepts_null(self.node, self.dialect)
        if actual == JsonObjectType.INTEGER:
            return bool(flags & (JsonObjectType.INTEGER | JsonObjectType.NUMBER))
        if actual == JsonObjectType.NUMBER:
            if JsonObjectType.NUMBER in flags:
                return True
            return JsonObjectType.INTEGER in flags and instance.is_integer()
        if actual == JsonObjectType.STRING:
            return bool(flags & (JsonObjectType.STRING | JsonObjectType.FILE))
        return actual in flags

    def check(self, instance: Any) -> str | None:
        if self.accepts(instance):
            return None
        return self.get_string(
            "error_message",
            actual_type=json_type_of(instance).names()[0] if json_type_of(instance) else type(instance).__name__,
            expected_types=", ".join(self.node.type_flags.names()),
        )


class EnumRule(ValidationRule):
    keyword = "enum"
    kind = ValidationErrorKind.ENUM

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.is_enumeration else None

    def check(self, instance: Any) -> str | None:
        if instance is None and accepts_null(self.node, self.dialect):
            return None
        if any(json_equal(instance, allowed) for allowed in self.node.enumeration):
            return None
        return self.get_string("error_message", value=_show(instance), allowed_values=_show(self.node.enumeration))


class ConstRule(ValidationRule):
    keyword = "const"
    kind = ValidationErrorKind.CONST

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.has_const else None

    def check(self, instance: Any) -> str | None:
        if json_equal(instance, self.node.const):
            return None
        return self.get_string("error_message", value=_show(instance), const_value=_show(self.node.const))


class NumericRule(ValidationRule):
    """Base class for rules constraining numbers only."""

    def applies_to(self, instance: Any) -> bool:
        return is_number(instance)


class MinimumRule(NumericRule):
    keyword = "minimum"
    kind = ValidationErrorKind.MINIMUM

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.minimum is not None else None

    @property
    def schema_pointer(self) -> str:
        keyword = "exclusiveMinimum" if self.node.exclusive_minimum else self.keyword
        return f"{self.node.pointer}/{keyword}"

    def error_kind(self) -> ValidationErrorKind:
        return ValidationErrorKind.EXCLUSIVE_MINIMUM if self.node.exclusive_minimum else self.kind

    def check(self, instance: Any) -> str | None:
        minimum = self.node.minimum
        if self.node.exclusive_minimum:
            if instance > minimum:
                return None
            return self.get_string("exclusive_error_message", value=instance, minimum=minimum)
        if instance >= minimum:
            return None
        return self.get_string("error_message", value=instance, minimum=minimum)


class MaximumRule(NumericRule):
    keyword = "maximum"
    kind = ValidationErrorKind.MAXIMUM

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.maximum is not None else None

    @property
    def schema_pointer(self) -> str:
        keyword = "exclusiveMaximum" if self.node.exclusive_maximum else self.keyword
        return f"{self.node.pointer}/{keyword}"

    def error_kind(self) -> ValidationErrorKind:
        return ValidationErrorKind.EXCLUSIVE_MAXIMUM if self.node.exclusive_maximum else self.kind

    def check(self, instance: Any) -> str | None:
        maximum = self.node.maximum
        if self.node.exclusive_maximum:
            if instance < maximum:
                return None
            return self.get_string("exclusive_error_message", value=instance, maximum=maximum)
        if instance <= maximum:
            return None
        return self.get_string("error_message", value=instance, maximum=maximum)


class MultipleOfRule(NumericRule):
    keyword = "multipleOf"
    kind = ValidationErrorKind.MULTIPLE_OF

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.multiple_of is not None else None

    def check(self, instance: Any) -> str | None:
        if is_multiple_of(instance, self.node.multiple_of):
            return None
        return self.get_string("error_message", value=instance, multiple_of=self.node.multiple_of)


class StringRule(ValidationRule):
    """Base class for rules constraining strings only."""

    def applies_to(self, instance: Any) -> bool:
        return isinstance(instance, str)


class MinLengthRule(StringRule):
    keyword = "minLength"
    kind = ValidationErrorKind.MIN_LENGTH

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.min_length is not None else None

    def check(self, instance: Any) -> str | None:
        if len(instance) >= self.node.min_length:
            return None
        return self.get_string("error_message", min_length=self.node.min_length, length=len(instance))


class MaxLengthRule(StringRule):
    keyword = "maxLength"
    kind = ValidationErrorKind.MAX_LENGTH

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.max_length is not None else None

    def check(self, instance: Any) -> str | None:
        if len(instance) <= self.node.max_length:
            return None
        return self.get_string("error_message", max_length=self.node.max_length, length=len(instance))


class PatternRule(StringRule):
    keyword = "pattern"
    kind = ValidationErrorKind.PATTERN

    def __init__(self, node: SchemaNode, dialect: SchemaDialect = SchemaDialect.JSON_SCHEMA):
        super().__init__(node, dialect)
        self.regex: re.Pattern | None = None
        self.compile_error: str | None = None
        try:
            self.regex = re.compile(node.pattern)
        except re.error as e:
            self.compile_error = str(e)

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.pattern is not None else None

    def error_kind(self) -> ValidationErrorKind:
        return ValidationErrorKind.INVALID_PATTERN if self.regex is None else self.kind

    def check(self, instance: Any) -> str | None:
        if self.regex is None:
            return self.get_string("invalid_pattern_message", pattern=self.node.pattern, reason=self.compile_error)
        if self.regex.search(instance):
            return None
        return self.get_string("error_message", value=_show(instance), pattern=self.node.pattern)


def _is_date_time(text: str) -> bool:
    if not _DATE_TIME_PATTERN.match(text):
        return False
    normalized = text.replace("z", "+00:00").replace("Z", "+00:00")
    try:
        datetime.fromisoformat(normalized.replace("t", "T"))
    except ValueError:
        return False
    return True


def _is_date(text: str) -> bool:
    if not _DATE_PATTERN.match(text):
        return False
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


def _is_uri(text: str) -> bool:
    parsed = urlparse(text)
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def _is_uuid(text: str) -> bool:
    if not _UUID_PATTERN.match(text):
        return False
    uuid.UUID(text)
    return True


def _is_ip(version: int):
    def check(text: str) -> bool:
        try:
            address = ipaddress.ip_address(text)
        except ValueError:
            return False
        return address.version == version

    return check


FORMAT_CHECKERS = {
    "date-time": _is_date_time,
    "date": _is_date,
    "email": lambda text: bool(_EMAIL_PATTERN.match(text)),
    "uri": _is_uri,
    "uuid": _is_uuid,
    "ipv4": _is_ip(4),
    "ipv6": _is_ip(6),
}


class FormatRule(StringRule):
    """Checks the formats listed in FORMAT_CHECKERS; any other format passes."""

    keyword = "format"
    kind = ValidationErrorKind.FORMAT

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.format in FORMAT_CHECKERS else None

    def check(self, instance: Any) -> str | None:
        if FORMAT_CHECKERS[self.node.format](instance):
            return None
        return self.get_string("error_message", value=_show(instance), format=self.node.format)


class ArrayRule(ValidationRule):
    """Base class for rules constraining arrays only."""

    def applies_to(self, instance: Any) -> bool:
        return isinstance(instance, list)


class MinItemsRule(ArrayRule):
    keyword = "minItems"
    kind = ValidationErrorKind.MIN_ITEMS

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.min_items is not None else None

    def check(self, instance: Any) -> str | None:
        if len(instance) >= self.node.min_items:
            return None
        return self.get_string("error_message", min_items=self.node.min_items, count=len(instance))


class MaxItemsRule(ArrayRule):
    keyword = "maxItems"
    kind = ValidationErrorKind.MAX_ITEMS

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.max_items is not None else None

    def check(self, instance: Any) -> str | None:
        if len(instance) <= self.node.max_items:
            return None
        return self.get_string("error_message", max_items=self.node.max_items, count=len(instance))


class UniqueItemsRule(ArrayRule):
    keyword = "uniqueItems"
    kind = ValidationErrorKind.UNIQUE_ITEMS

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.unique_items else None

    def check(self, instance: Any) -> str | None:
        for index, item in enumerate(instance):
            if any(json_equal(item, earlier) for earlier in instance[:index]):
                return self.get_string("error_message", index=index)
        return None


class ObjectRule(ValidationRule):
    """Base class for rules constraining objects only."""

    def applies_to(self, instance: Any) -> bool:
        return isinstance(instance, dict)


class MinPropertiesRule(ObjectRule):
    keyword = "minProperties"
    kind = ValidationErrorKind.MIN_PROPERTIES

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.min_properties is not None else None

    def check(self, instance: Any) -> str | None:
        if len(instance) >= self.node.min_properties:
            return None
        return self.get_string("error_message", min_properties=self.node.min_properties, count=len(instance))


class MaxPropertiesRule(ObjectRule):
    keyword = "maxProperties"
    kind = ValidationErrorKind.MAX_PROPERTIES

    @classmethod
    def from_node(cls, node: SchemaNode, dialect: SchemaDialect) -> ValidationRule | None:
        return cls(node, dialect) if node.max_properties is not None else None

    def check(self, instance: Any) -> str | None:
        if len(instance) <= self.node.max_properties:
            return None
        return self.get_string("error_message", max_properties=self.node.max_properties, count=len(instance))


# Evaluation order of the value-level keywords on one node
RULE_CLASSES: list[type[ValidationRule]] = [
    TypeRule,
    EnumRule,
    ConstRule,
    MinimumRule,
    MaximumRule,
    MultipleOfRule,
    MinLengthRule,
    MaxLengthRule,
    PatternRule,
    FormatRule,
    MinItemsRule,
    MaxItemsRule,
    UniqueItemsRule,
    MinPropertiesRule,
    MaxPropertiesRule,
]


def rules_for_node(node: SchemaNode, dialect: SchemaDialect = SchemaDialect.JSON_SCHEMA) -> list[ValidationRule]:
    """Build the value-level rules that apply to one schema node."""
    rules = []
    for rule_class in RULE_CLASSES:
        rule = rule_class.from_node(node, dialect)
        if rule is not None:
            rules.append(rule)
    return rules
