"""Generic verb dispatch.

A verb call takes one of three shapes, resolved once per call:

- ``say("Hello", voice="woman")`` - text content plus optional attributes;
- ``hangup()`` / ``reject(reason="busy")`` - attributes only;
- ``gather(menu, digits=1)`` or ``with gather(digits=1):`` - a nested
  composition, for container verbs only.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Union

from twiml_builder.verbs.catalog import VerbSpec

if TYPE_CHECKING:
    from twiml_builder.markup.composer import MarkupBuilder, Scope

Body = Callable[["MarkupBuilder"], Any]


class VerbUsageError(TypeError):
    """Raised when a verb is called with a shape its capability does not allow."""


@dataclass(frozen=True)
class TextContent:
    """Verb wrapping text: ``<Tag attrs>text</Tag>``."""

    text: str
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AttributesOnly:
    """Verb with attributes and no content: ``<Tag attrs />``."""

    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NestedBody:
    """Container verb wrapping a nested composition."""

    attributes: Dict[str, Any] = field(default_factory=dict)
    body: Optional[Body] = None


VerbCall = Union[TextContent, AttributesOnly, NestedBody]


def _merge(
    positional: Optional[Mapping[str, Any]], keywords: Mapping[str, Any]
) -> Dict[str, Any]:
    merged = dict(positional or {})
    merged.update(keywords)
    return merged


def resolve_call(
    spec: VerbSpec,
    content: Any = None,
    attributes: Optional[Mapping[str, Any]] = None,
    keywords: Optional[Mapping[str, Any]] = None,
) -> VerbCall:
    """Classify a verb call by the shape of its arguments.

    Args:
        spec: Catalog entry of the verb being called
        content: First positional argument: text, attribute mapping, body or None
        attributes: Second positional argument, an attribute mapping
        keywords: Keyword attributes, appended after ``attributes``

    Returns:
        The resolved call variant
    """
    keywords = keywords or {}

    if isinstance(content, str):
        return TextContent(content, _merge(attributes, keywords))

    if isinstance(content, Mapping):
        if attributes is not None:
            raise VerbUsageError(
                f"{spec.name}() takes a single attribute mapping, got two"
            )
        attributes, content = content, None

    if callable(content):
        if not spec.is_container:
            raise VerbUsageError(f"{spec.name}() cannot contain nested verbs")
        return NestedBody(_merge(attributes, keywords), content)

    if content is not None:
        return TextContent(str(content), _merge(attributes, keywords))

    if spec.is_container:
        return NestedBody(_merge(attributes, keywords))
    return AttributesOnly(_merge(attributes, keywords))


def dispatch(builder: "MarkupBuilder", spec: VerbSpec, call: VerbCall) -> Optional["Scope"]:
    """Emit a resolved verb call into ``builder``.

    Returns the pending ``Scope`` for a container called without a body,
    otherwise None.
    """
    if isinstance(call, TextContent):
        builder.open(spec.name, call.attributes)
        builder.emit_text(call.text)
        builder.close()
        return None
    if isinstance(call, AttributesOnly):
        builder.emit_empty(spec.name, call.attributes)
        return None
    return builder.open_scope(spec.name, call.attributes, call.body)


def invoke(
    builder: "MarkupBuilder",
    spec: VerbSpec,
    content: Any = None,
    attributes: Optional[Mapping[str, Any]] = None,
    /,
    **keywords: Any,
) -> Optional["Scope"]:
    """Resolve and emit one verb call."""
    return dispatch(builder, spec, resolve_call(spec, content, attributes, keywords))
