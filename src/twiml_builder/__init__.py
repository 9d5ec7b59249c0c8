"""TwiML Builder.

Compose TwiML voice and messaging responses from plain Python code: verbs
are builder methods, nesting is a ``with`` block (or a nested function), and
the result is a compact XML document string.

Progressive API Disclosure:
- Level 1: Simple function - build()
- Level 2: Document context manager - TwimlDocument
- Level 3: Custom verbs and configuration - VerbRegistry, BuilderConfig

Example:
    >>> def welcome(twiml):
    ...     twiml.play("/assets/welcome.mp3")
    ...     with twiml.gather(digits=1):
    ...         twiml.say("For more menus, please press 1.", voice="woman")
    >>> build(welcome)
    '<?xml version="1.0" encoding="UTF-8"?><Response><Play>/assets/welcome.mp3</Play><Gather digits="1"><Say voice="woman">For more menus, please press 1.</Say></Gather></Response>'
"""

__version__ = "0.1.0"
__author__ = "TwiML Builder Team"

# Level 1 and 2: building documents
from .api import DocumentStateError, TwimlDocument, build

# Builder objects handed to composition routines
from .markup import MarkupBuilder, Scope

# Configuration and result objects
from .shared import BuilderConfig, OptionRecord

# Level 3: verb catalog
from .verbs import DEFAULT_REGISTRY, VerbCapability, VerbRegistry

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Building documents
    "build",
    "TwimlDocument",
    "DocumentStateError",

    # Builder objects
    "MarkupBuilder",
    "Scope",

    # Configuration and results
    "BuilderConfig",
    "OptionRecord",

    # Verb catalog
    "DEFAULT_REGISTRY",
    "VerbCapability",
    "VerbRegistry",
]
