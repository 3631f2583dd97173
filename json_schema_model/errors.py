"""
Exceptions raised by the schema model.

Reference and cycle errors are fatal to the pass that triggered them and
always carry the offending JSON pointer. Validation problems are never
raised; they are returned as ValidationError records.
"""

from __future__ import annotations

from dataclasses import dataclass


class SchemaModelError(Exception):
    """Base class for all schema model errors."""

    def __init__(self, message: str, pointer: str = ""):
        super().__init__(message)
        self.pointer = pointer


class SchemaParseError(SchemaModelError):
    """A value that must be a schema object is something else."""


class SchemaReferenceError(SchemaModelError):
    """A $ref points to a location that does not exist."""

    def __init__(self, reference: str, pointer: str = ""):
        super().__init__(f"Unresolvable reference '{reference}' at '{pointer or '#'}'", pointer)
        self.reference = reference


class SchemaCycleError(SchemaModelError):
    """A chain of $ref never reaches a node that is not itself a reference."""

    def __init__(self, pointer: str, chain: list[str]):
        super().__init__(f"Reference cycle at '{pointer}': {' -> '.join(chain)}", pointer)
        self.chain = chain


class NameCollisionError(SchemaModelError):
    """No unique identifier could be produced for a generated type."""

    def __init__(self, name: str, pointer: str = ""):
        super().__init__(f"Could not find a unique name for '{name}'", pointer)
        self.name = name


@dataclass(frozen=True)
class GenerationWarning:
    """A non-fatal problem found on one schema node during a generation pass."""

    pointer: str
    message: str

    def to_dict(self) -> dict:
        return {"pointer": self.pointer, "message": self.message}
