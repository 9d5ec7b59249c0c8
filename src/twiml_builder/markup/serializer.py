"""Fragment serialization for TwiML markup.

Pure functions turning a snake_case tag identifier and an attribute mapping
into the exact text of opening, closing and self-closing tags. Output is
compact: no whitespace is inserted between fragments and attributes keep the
order the caller supplied them in.

Examples:
    >>> opening_tag("gather", {"digits": 3})
    '<Gather digits="3">'
    >>> self_closing_tag("record", {"finish_on_key": "#", "transcribe": True})
    '<Record finishOnKey="#" transcribe="true" />'
    >>> closing_tag("end_conference_on_exit")
    '</EndConferenceOnExit>'
"""

from typing import Any, Mapping, Optional, Union
from xml.sax.saxutils import escape

AttributeValue = Union[str, bool, int]
Attributes = Optional[Mapping[str, AttributeValue]]

_ATTRIBUTE_ENTITIES = {'"': "&quot;"}


class AttributeValueError(TypeError):
    """Raised when an attribute value is not a string, boolean or integer."""

    def __init__(self, key: str, value: Any) -> None:
        super().__init__(
            f"Attribute {key!r} has unsupported value type "
            f"{type(value).__name__}; expected str, bool or int"
        )
        self.key = key
        self.value = value


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def pascal_case(identifier: str) -> str:
    """Convert a tag identifier to its XML element name.

    >>> pascal_case("end_conference_on_exit")
    'EndConferenceOnExit'
    """
    return "".join(_capitalize(word) for word in identifier.split("_") if word)


def camel_case(key: str) -> str:
    """Convert an attribute key to its XML attribute name.

    A single trailing underscore is dropped so Python keywords can be used
    as keys (``from_`` becomes ``from``).

    >>> camel_case("finish_on_key")
    'finishOnKey'
    """
    if key.endswith("_"):
        key = key[:-1]
    first, *rest = key.split("_")
    return first + "".join(_capitalize(word) for word in rest if word)


def format_value(value: Any, key: str = "<value>") -> str:
    """Render an attribute value as text.

    Booleans are checked first since ``bool`` is a subclass of ``int``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    raise AttributeValueError(key, value)


def escape_text(value: str) -> str:
    """Escape ``&``, ``<`` and ``>`` in character data."""
    return escape(value)


def format_attributes(attributes: Attributes = None, escape_values: bool = False) -> str:
    """Render attributes as `` key="value"`` pairs, or ``""`` when there are none."""
    if not attributes:
        return ""

    pairs = []
    for key, value in attributes.items():
        text = format_value(value, key)
        if escape_values:
            text = escape(text, _ATTRIBUTE_ENTITIES)
        pairs.append(f'{camel_case(key)}="{text}"')
    return " " + " ".join(pairs)


def opening_tag(tag: str, attributes: Attributes = None, escape_values: bool = False) -> str:
    """Render ``<Tag attrs>``."""
    return f"<{pascal_case(tag)}{format_attributes(attributes, escape_values)}>"


def self_closing_tag(
    tag: str, attributes: Attributes = None, escape_values: bool = False
) -> str:
    """Render ``<Tag attrs />``."""
    return f"<{pascal_case(tag)}{format_attributes(attributes, escape_values)} />"


def closing_tag(tag: str) -> str:
    """Render ``</Tag>``."""
    return f"</{pascal_case(tag)}>"


def xml_declaration(version: str = "1.0", encoding: str = "UTF-8") -> str:
    """Render the XML declaration that opens every document."""
    return f'<?xml version="{version}" encoding="{encoding}"?>'
