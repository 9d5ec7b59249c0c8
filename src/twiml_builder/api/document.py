"""Document building API with progressive disclosure.

Level 1 is the ``build`` function: hand it a composition routine and get the
finished document back. Level 2 is ``TwimlDocument``, a context manager that
exposes the builder directly and keeps the build's options and metrics
around afterwards.
"""

import time
import uuid
from typing import Any, Callable, List, Optional

from twiml_builder.markup import (
    FragmentBuffer,
    MarkupBuilder,
    ScopeError,
    xml_declaration,
)
from twiml_builder.shared import (
    BuilderConfig,
    BuildMetrics,
    BuildOutput,
    OptionRecord,
    get_logger,
)
from twiml_builder.verbs import VerbRegistry

MS_PER_SECOND = 1000

Routine = Callable[[MarkupBuilder], Any]


class DocumentStateError(RuntimeError):
    """Raised when a document is read before it is built, or built twice."""


class TwimlDocument:
    """A single TwiML document build.

    Examples:
        >>> document = TwimlDocument()
        >>> with document as twiml:
        ...     twiml.say("Hello there!", voice="woman")
        >>> document.result
        '<?xml version="1.0" encoding="UTF-8"?><Response><Say voice="woman">Hello there!</Say></Response>'
    """

    def __init__(
        self,
        config: Optional[BuilderConfig] = None,
        registry: Optional[VerbRegistry] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the document.

        Args:
            config: Builder configuration; defaults to ``BuilderConfig()``
            registry: Verb catalog; defaults to the built-in TwiML verbs
            correlation_id: Optional correlation ID for log records of this build
        """
        self.config = config or BuilderConfig()
        self.registry = registry
        if correlation_id is None and self.config.global_.enable_correlation_tracking:
            correlation_id = str(uuid.uuid4())
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "document")

        self.metrics: Optional[BuildMetrics] = None
        self._markup: Optional[str] = None
        self._options: List[OptionRecord] = []
        self._builder: Optional[MarkupBuilder] = None
        self._buffers: List[FragmentBuffer] = []
        self._started = 0.0

    @property
    def built(self) -> bool:
        """Whether the document finished building successfully."""
        return self._markup is not None

    @property
    def markup(self) -> str:
        """The finished XML document."""
        if self._markup is None:
            raise DocumentStateError("Document has not been built")
        return self._markup

    @property
    def options(self) -> List[OptionRecord]:
        """Option records in the order they were declared."""
        if self._markup is None:
            raise DocumentStateError("Document has not been built")
        return list(self._options)

    @property
    def result(self) -> BuildOutput:
        """The markup, or ``(options, markup)`` when any option was recorded."""
        markup = self.markup
        if self._options:
            return list(self._options), markup
        return markup

    def __enter__(self) -> MarkupBuilder:
        if self._builder is not None or self.built:
            raise DocumentStateError("A TwimlDocument can only be built once")

        self._started = time.time()
        serialization = self.config.serialization
        markup = FragmentBuffer(
            [xml_declaration(serialization.xml_version, serialization.encoding)],
            name="markup",
        )
        options = FragmentBuffer(name="options")
        self._buffers = [markup, options]

        self._builder = MarkupBuilder(
            markup,
            options,
            registry=self.registry,
            escape=serialization.escape_special_characters,
        )
        self.logger.debug("Starting document build", extra={"root_tag": serialization.root_tag})

        self._builder.open(serialization.root_tag)
        return self._builder

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        markup, options = self._buffers
        try:
            if exc_type is None:
                self._close_root()
                self._markup = markup.render()
                self._options = options.snapshot()
        finally:
            markup.dispose()
            options.dispose()
            self._finish(failed=exc_type is not None)
        return False

    def _close_root(self) -> None:
        builder = self._builder
        if builder.depth < 1:
            raise ScopeError("Closed more tags than were opened; the root tag was closed early")
        if builder.depth > 1:
            unclosed = ", ".join(builder.open_tags[1:])
            raise ScopeError(f"Unclosed tags at end of document: {unclosed}")
        builder.close()

    def _finish(self, failed: bool) -> None:
        processing_time = (time.time() - self._started) * MS_PER_SECOND
        if failed or self._markup is None:
            self.logger.debug(
                "Document build aborted",
                extra={"processing_time_ms": processing_time},
            )
            return

        if self.config.global_.enable_build_metrics:
            self.metrics = BuildMetrics(
                fragments_written=self._builder.fragment_count,
                options_recorded=self._builder.options_recorded,
                max_depth=self._builder.max_depth,
                processing_time_ms=processing_time,
            )
            self.logger.debug("Document build finished", extra=self.metrics.to_dict())

    def compose(self, routine: Routine) -> BuildOutput:
        """Run ``routine`` inside the root scope and return the result."""
        with self as builder:
            routine(builder)
        return self.result


def build(
    routine: Routine,
    config: Optional[BuilderConfig] = None,
    registry: Optional[VerbRegistry] = None,
    correlation_id: Optional[str] = None,
) -> BuildOutput:
    """Build a TwiML document from a composition routine.

    Args:
        routine: Called once with the MarkupBuilder of the new document
        config: Builder configuration
        registry: Verb catalog; defaults to the built-in TwiML verbs
        correlation_id: Optional correlation ID for log records of this build

    Returns:
        The document string, or ``(options, document)`` when the routine
        recorded any menu options

    Examples:
        >>> build(lambda twiml: twiml.hangup())
        '<?xml version="1.0" encoding="UTF-8"?><Response><Hangup /></Response>'

        >>> def menu(twiml):
        ...     for digit in (1, 2):
        ...         twiml.record_option(digit, f"Press {digit}")
        >>> options, markup = build(menu)
        >>> options
        [OptionRecord(discriminator=1, menu_attributes={}), OptionRecord(discriminator=2, menu_attributes={})]
    """
    document = TwimlDocument(config, registry, correlation_id)
    return document.compose(routine)
