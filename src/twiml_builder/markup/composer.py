"""Scope composition for TwiML markup.

``MarkupBuilder`` is the object a composition routine receives. Every call on
it appends fragments to a single linear buffer; nesting comes from opening a
tag, running the nested composition, then closing the tag again. The tree is
never materialized: it is encoded in append order, and tags balance because
every scope closes on the way out, whether the nested composition returned
or raised.

Example:
    >>> with builder.gather(digits=1):
    ...     builder.say("Press 1 for sales.")
    ...     for index, name in enumerate(departments, start=1):
    ...         builder.record_option(index, f"Press {index} for {name}.")
"""

import functools
from typing import Any, Callable, List, Mapping, Optional, Tuple

from twiml_builder.markup.buffer import FragmentBuffer
from twiml_builder.markup.serializer import (
    Attributes,
    closing_tag,
    escape_text,
    opening_tag,
    self_closing_tag,
)
from twiml_builder.shared.result import OptionRecord
from twiml_builder.verbs.catalog import DEFAULT_REGISTRY, VerbRegistry
from twiml_builder.verbs.dispatch import invoke

Body = Callable[["MarkupBuilder"], Any]


class ScopeError(RuntimeError):
    """Raised when tags would not balance."""


class Scope:
    """A container tag awaiting its nested composition.

    Entering the scope writes the opening tag and exiting writes the closing
    tag. A scope that is never entered is written as a self-closing tag just
    before the next fragment, so ``builder.dial(action="/x")`` on its own
    still renders ``<Dial action="/x" />``.
    """

    def __init__(self, builder: "MarkupBuilder", tag: str, attributes: Attributes = None) -> None:
        self.builder = builder
        self.tag = tag
        self.attributes = dict(attributes or {})
        self.emitted = False
        self.depth = 0
        # Rendered up front so bad attribute values fail at the call site
        self.fragment = self_closing_tag(tag, self.attributes, builder.escape)

    def __enter__(self) -> "MarkupBuilder":
        self.builder._enter_scope(self)
        return self.builder

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.builder._exit_scope(self, failed=exc_type is not None)
        return False

    def __repr__(self) -> str:
        return f"Scope(tag={self.tag!r}, attributes={self.attributes!r}, emitted={self.emitted})"


class MarkupBuilder:
    """Appends TwiML fragments for one document.

    Verbs from the registry are available as methods: ``builder.say(...)``,
    ``builder.gather(...)``. Use ``verb(name, ...)`` for verbs whose name
    clashes with a builder method.
    """

    def __init__(
        self,
        markup: FragmentBuffer,
        options: FragmentBuffer,
        registry: Optional[VerbRegistry] = None,
        escape: bool = False,
    ) -> None:
        """Initialize the builder.

        Args:
            markup: Buffer receiving markup fragments
            options: Side-channel buffer receiving option records
            registry: Verb catalog; defaults to the built-in TwiML verbs
            escape: Escape XML special characters in text and attribute values
        """
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.escape = escape
        self._markup = markup
        self._options = options
        self._open_tags: List[str] = []
        self._pending: Optional[Scope] = None

        self.fragment_count = 0
        self.options_recorded = 0
        self.max_depth = 0

    def __getattr__(self, name: str) -> Callable[..., Optional[Scope]]:
        # Only reached when normal attribute lookup fails
        registry = self.__dict__.get("registry")
        if name.startswith("_") or registry is None or name not in registry:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute or verb {name!r}"
            )
        return functools.partial(invoke, self, registry.get(name))

    @property
    def depth(self) -> int:
        """Number of tags currently open."""
        return len(self._open_tags)

    @property
    def open_tags(self) -> Tuple[str, ...]:
        """Open tag identifiers, outermost first."""
        return tuple(self._open_tags)

    def _flush_pending(self) -> None:
        scope, self._pending = self._pending, None
        if scope is not None:
            scope.emitted = True
            self._write(scope.fragment)

    def _write(self, fragment: str) -> None:
        self._flush_pending()
        self._markup.append(fragment)
        self.fragment_count += 1

    def open(self, tag: str, attributes: Attributes = None) -> None:
        """Write the opening tag and make ``tag`` the innermost open tag."""
        self._write(opening_tag(tag, attributes, self.escape))
        self._open_tags.append(tag)
        self.max_depth = max(self.max_depth, len(self._open_tags))

    def close(self) -> None:
        """Write the closing tag of the innermost open tag."""
        self._flush_pending()
        if not self._open_tags:
            raise ScopeError("close() called with no open tag")
        self._write(closing_tag(self._open_tags.pop()))

    def emit_text(self, value: Any) -> None:
        """Write ``value`` as text content."""
        text = str(value)
        self._write(escape_text(text) if self.escape else text)

    def emit_empty(self, tag: str, attributes: Attributes = None) -> None:
        """Write a self-closing tag."""
        self._write(self_closing_tag(tag, attributes, self.escape))

    def open_scope(
        self, tag: str, attributes: Attributes = None, body: Optional[Body] = None
    ) -> Optional[Scope]:
        """Compose a container tag.

        With a ``body``, opens ``tag``, calls ``body(builder)`` and closes
        ``tag``. Without one, returns a ``Scope`` to use as a context manager.

        Args:
            tag: snake_case tag identifier; need not be in the verb registry
            attributes: Attribute mapping, written in order
            body: Nested composition routine

        Returns:
            The pending Scope when no body was given, otherwise None
        """
        scope = Scope(self, tag, attributes)
        self._flush_pending()
        self._pending = scope
        if body is None:
            return scope

        with scope:
            body(self)
        return None

    def _enter_scope(self, scope: Scope) -> None:
        if scope is not self._pending:
            raise ScopeError(
                f"Scope for {scope.tag!r} was already written; "
                "enter a container scope directly where it is created"
            )
        self._pending = None
        scope.emitted = True
        self.open(scope.tag, scope.attributes)
        scope.depth = self.depth

    def _exit_scope(self, scope: Scope, failed: bool) -> None:
        if not failed and self.depth < scope.depth:
            raise ScopeError(f"Closed more tags than were opened inside {scope.tag!r}")
        if not failed and self.depth > scope.depth:
            unclosed = ", ".join(self._open_tags[scope.depth:]) or scope.tag
            raise ScopeError(f"Unclosed tags inside {scope.tag!r}: {unclosed}")
        while self.depth >= scope.depth:
            self.close()

    def verb(self, name: str, *args: Any, **attributes: Any) -> Optional[Scope]:
        """Call a registered verb by name."""
        return invoke(self, self.registry.get(name), *args, **attributes)

    def record_option(
        self,
        discriminator: Any,
        text: Any,
        menu_attributes: Optional[Mapping[str, Any]] = None,
        leaf_attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Record a menu option and say its prompt.

        Appends ``(discriminator, menu_attributes)`` to the options side
        channel, then writes ``text`` through the ``say`` verb, so a
        ``None`` prompt renders ``<Say />`` like any attributes-only call.

        Args:
            discriminator: Value identifying the option (e.g. the digit)
            text: Prompt spoken for the option
            menu_attributes: Caller data kept with the option, never serialized
            leaf_attributes: Attributes of the ``Say`` tag
        """
        menu = menu_attributes if menu_attributes is not None else {}
        self._options.append(OptionRecord(discriminator, menu))
        self.options_recorded += 1
        self.verb("say", text, leaf_attributes)
