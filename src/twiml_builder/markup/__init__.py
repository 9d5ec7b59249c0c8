"""Markup engine for TwiML documents.

Key Components:
    serializer: Pure functions rendering opening, closing and self-closing tags
    FragmentBuffer: Ordered, append-only fragment storage
    MarkupBuilder: Scope composer that nests tags through append order
"""

from .serializer import (
    AttributeValueError,
    camel_case,
    closing_tag,
    format_attributes,
    format_value,
    opening_tag,
    pascal_case,
    self_closing_tag,
    xml_declaration,
)
from .buffer import BufferDisposedError, FragmentBuffer
from .composer import MarkupBuilder, Scope, ScopeError

__all__ = [
    "AttributeValueError",
    "camel_case",
    "closing_tag",
    "format_attributes",
    "format_value",
    "opening_tag",
    "pascal_case",
    "self_closing_tag",
    "xml_declaration",
    "BufferDisposedError",
    "FragmentBuffer",
    "MarkupBuilder",
    "Scope",
    "ScopeError",
]
