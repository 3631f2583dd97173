"""
Utility functions for identifier generation.

Sanitization convention used by every default name generator:

- "-" and whitespace are camel-case boundaries and are removed
  ("foo-bar" -> "FooBar")
- "_" is kept as written
- "+" becomes "Plus", "*" becomes "Star"
- any other character that cannot appear in an identifier is dropped
- the first character is upper-cased; a leading digit gets a "_" prefix

Callers translate the remaining punctuation ("." ":" "/" ...) to either a
boundary or an underscore before calling convert_to_upper_camel_case.
"""

import re

_BOUNDARY_PATTERN = re.compile(r"[-\s]+(.?)")
_ILLEGAL_PATTERN = re.compile(r"[^A-Za-z0-9_]")
_GENERIC_PATTERN = re.compile(r"[\[<]")


def _convert_boundaries(text: str) -> str:
    """Remove "-" and whitespace, upper-casing the character that follows."""
    return _BOUNDARY_PATTERN.sub(lambda m: m.group(1).upper(), text)


def convert_to_upper_camel_case(text: str, first_character_must_be_alpha: bool = True) -> str:
    """Convert text to an UpperCamelCase identifier.

    Examples:
        "foo-bar" -> "FooBar"
        "odata-context" -> "OdataContext"
        "first_name" -> "First_name"
        "3d" -> "_3d"

    Args:
        text: The text to convert
        first_character_must_be_alpha: Prefix "_" when the result starts with a digit

    Returns:
        The identifier, or "" when text holds no identifier character
    """
    if not text:
        return ""
    converted = _convert_boundaries(text).replace("+", "Plus").replace("*", "Star")
    converted = _ILLEGAL_PATTERN.sub("", converted)
    if not converted:
        return ""
    converted = converted[0].upper() + converted[1:]
    if first_character_must_be_alpha and converted[0].isdigit():
        converted = "_" + converted
    return converted


def convert_generic_name(text: str) -> str:
    """Turn generic type syntax into a plain name ("Foo[Bar[Inner]]" -> "FooOfBarOfInner")."""
    text = re.sub(r"`\d+", "", text)
    text = _GENERIC_PATTERN.sub("Of", text)
    text = re.sub(r",\s*", "And", text)
    return re.sub(r"[\]>]", "", text)


def is_identifier_like(text: str | None) -> bool:
    """Whether text is already usable as an identifier."""
    return bool(text) and re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", text) is not None
