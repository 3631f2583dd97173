"""
Python code generation backend.

Generates Python dataclass code from TypeDescriptors.
"""

from __future__ import annotations

import keyword
import re
from typing import Any

from ..analyzer.ir_nodes import (
    DefaultValueKind,
    GenerationResult,
    PropertyDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeRef,
)
from ..analyzer.name_resolver import unique_member_name
from .base import CodeBackend

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """Convert a PascalCase identifier to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def python_identifier(name: str) -> str:
    """Make a generated name usable as a Python identifier."""
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        return f"{name}_"
    return name


def split_union(annotation: str) -> list[str]:
    """Split "A | list[B | None] | None" into its top-level members."""
    parts = []
    depth = 0
    start = 0
    for index, char in enumerate(annotation):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == "|" and depth == 0:
            parts.append(annotation[start:index].strip())
            start = index + 1
    parts.append(annotation[start:].strip())
    return parts


def _docstring(text: str | None) -> str | None:
    if not text or not text.strip():
        return None
    return text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


class PythonDataclassBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"

    TYPE_MAP = {
        "integer": "int",
        "string": "str",
        "boolean": "bool",
        "number": "float",
        "null": "None",
        "file": "bytes",
    }

    def __init__(self, generation_comment: str | None = None):
        super().__init__(generation_comment)
        self.python_imports: set[tuple[str, str]] = set()

    def generate(self, result: GenerationResult) -> str:
        """Generate Python code for a generation pass."""
        self.python_imports = {("dataclasses", "dataclass"), ("dataclasses_json", "dataclass_json")}

        blocks = []
        for descriptor in self.order_types(result.types):
            if descriptor.kind == TypeKind.ENUM:
                blocks.append(self.emit_enum(descriptor))
            else:
                blocks.append(self.emit_type(descriptor))

        prefix = self.prefix_template.render(
            generation_comment=self.generation_comment,
            required_imports=self._assemble_imports(),
        )
        output = prefix + "\n\n".join(block.rstrip("\n") + "\n" for block in blocks)
        return output + self.suffix_template.render()

    def emit_type(self, descriptor: TypeDescriptor) -> str:
        name = python_identifier(descriptor.name)
        if descriptor.kind != TypeKind.OBJECT:
            return f"{name} = {self._alias_target(descriptor)}\n"

        used: set[str] = set()
        properties = []
        for prop in self._order_properties(descriptor.properties):
            context = self.emit_property(prop)
            context["name"] = unique_member_name(context["name"], used)
            properties.append(self._map_json_name(context))

        if any(p["default"] and p["default"].startswith("field(") for p in properties):
            self.python_imports.add(("dataclasses", "field"))
        if descriptor.is_abstract:
            self.python_imports.add(("abc", "ABC"))

        bases = [python_identifier(descriptor.base_type)] if descriptor.base_type else []
        if descriptor.is_abstract:
            bases.append("ABC")

        return self.class_template.render(
            CLASS_NAME=name,
            EXTENDS=", ".join(bases),
            DESCRIPTION=_docstring(descriptor.description),
            properties=properties,
        )

    def emit_enum(self, descriptor: TypeDescriptor) -> str:
        self.python_imports.add(("enum", "Enum"))
        values = [m.value for m in descriptor.enum_members]
        mixin = None
        if values and all(isinstance(v, str) for v in values):
            mixin = "str"
        elif values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            mixin = "int"

        members = [{"name": python_identifier(m.name), "value": repr(m.value)} for m in descriptor.enum_members]
        return self.enum_template.render(
            CLASS_NAME=python_identifier(descriptor.name),
            EXTENDS=f"{mixin}, Enum" if mixin else "Enum",
            DESCRIPTION=_docstring(descriptor.description),
            members=members,
        )

    def emit_property(self, prop: PropertyDescriptor) -> dict[str, Any]:
        annotation = self.translate_type(prop.type_ref)
        default = self.format_default_value(prop)
        if default is None and not prop.is_required:
            default = "None"
            if not annotation.endswith(" | None") and annotation not in ("Any", "None"):
                annotation = f"{annotation} | None"

        comment_lines = prop.description.strip().splitlines() if prop.description else []
        return {
            "name": python_identifier(to_snake_case(prop.name)),
            "json_name": prop.json_name,
            "type": annotation,
            "default": default,
            "comment_lines": [line.rstrip() for line in comment_lines],
        }

    def _map_json_name(self, context: dict[str, Any]) -> dict[str, Any]:
        """Keep the JSON property name in the field metadata when the identifier differs."""
        if context["name"] == context["json_name"]:
            return context
        self.python_imports.add(("dataclasses_json", "config"))
        metadata = f"metadata=config(field_name={context['json_name']!r})"
        default = context["default"]
        if default is None:
            context["default"] = f"field({metadata})"
        elif default.startswith("field("):
            context["default"] = f"{default[:-1]}, {metadata})"
        else:
            context["default"] = f"field(default={default}, {metadata})"
        return context

    def translate_type(self, type_ref: TypeRef) -> str:
        result = self._translate_type_inner(type_ref)
        if type_ref.is_nullable and result not in ("Any", "None") and not result.endswith(" | None"):
            result = f"{result} | None"
        return result

    def _translate_type_inner(self, type_ref: TypeRef) -> str:
        if type_ref.kind in (TypeKind.OBJECT, TypeKind.ENUM) and type_ref.name:
            return python_identifier(type_ref.name)
        if type_ref.kind == TypeKind.PRIMITIVE:
            return self.TYPE_MAP.get(type_ref.primitive) or self._any()
        if type_ref.kind == TypeKind.ARRAY:
            if type_ref.items:
                return f"tuple[{', '.join(self.translate_type(i) for i in type_ref.items)}]"
            return f"list[{self.translate_type(type_ref.item) if type_ref.item else self._any()}]"
        if type_ref.kind == TypeKind.DICTIONARY:
            value = self.translate_type(type_ref.value) if type_ref.value else self._any()
            return f"dict[str, {value}]"
        if type_ref.alternatives:
            return self._union(type_ref.alternatives)
        return self._any()

    def format_default_value(self, prop: PropertyDescriptor) -> str | None:
        """
        Format the default of a property as a Python expression.

        Args:
            prop: The property descriptor

        Returns:
            The expression, or None when the field has no default
        """
        default = prop.default
        if default.kind == DefaultValueKind.LITERAL:
            if isinstance(default.value, (list, dict)):
                return f"field(default_factory=lambda: {default.value!r})"
            return repr(default.value)
        if default.kind == DefaultValueKind.ENUM_MEMBER:
            return f"{python_identifier(default.enum_type)}.{python_identifier(default.enum_member)}"
        if default.kind == DefaultValueKind.EMPTY_ARRAY:
            return "field(default_factory=list)"
        if default.kind == DefaultValueKind.EMPTY_DICTIONARY:
            return "field(default_factory=dict)"
        if default.kind == DefaultValueKind.NEW_OBJECT and prop.type_ref.name:
            return f"field(default_factory={python_identifier(prop.type_ref.name)})"
        return None

    def _alias_target(self, descriptor: TypeDescriptor) -> str:
        if descriptor.kind == TypeKind.ARRAY:
            item = self.translate_type(descriptor.item_type) if descriptor.item_type else self._any()
            return f"list[{item}]"
        if descriptor.kind == TypeKind.DICTIONARY:
            value = (
                self.translate_type(descriptor.dictionary_value_type)
                if descriptor.dictionary_value_type
                else self._any()
            )
            return f"dict[str, {value}]"
        if descriptor.kind == TypeKind.PRIMITIVE:
            return self.TYPE_MAP.get(descriptor.value_type) or self._any()
        if descriptor.alternatives:
            return self._union(descriptor.alternatives)
        return self._any()

    def _union(self, alternatives: tuple[TypeRef, ...]) -> str:
        members: list[str] = []
        for alternative in alternatives:
            translated = self.translate_type(alternative)
            for part in split_union(translated):
                if part not in members:
                    members.append(part)
        if "Any" in members:
            return self._any()
        # None last, as in hand-written annotations
        if "None" in members:
            members.remove("None")
            members.append("None")
        return " | ".join(members)

    def _any(self) -> str:
        self.python_imports.add(("typing", "Any"))
        return "Any"

    @staticmethod
    def _order_properties(properties: tuple[PropertyDescriptor, ...]) -> list[PropertyDescriptor]:
        """Required fields first, then optional ones, keeping document order within each group."""
        required = [p for p in properties if p.is_required]
        optional = [p for p in properties if not p.is_required]
        return required + optional

    def _assemble_imports(self) -> list[str]:
        modules: dict[str, list[str]] = {}
        for module, name in sorted(self.python_imports):
            modules.setdefault(module, []).append(name)
        return [f"from {module} import {', '.join(names)}" for module, names in modules.items()]
