"""TwiML verb catalog and dispatch.

Key Components:
    VerbRegistry: Table of verb names and their leaf/container capability
    resolve_call: Classifies a verb call by argument shape
    dispatch: Emits a resolved call through the markup builder
"""

from .catalog import (
    CONTAINER_VERBS,
    DEFAULT_REGISTRY,
    LEAF_VERBS,
    UnknownVerbError,
    VerbCapability,
    VerbRegistry,
    VerbSpec,
)
from .dispatch import (
    AttributesOnly,
    NestedBody,
    TextContent,
    VerbUsageError,
    dispatch,
    invoke,
    resolve_call,
)

__all__ = [
    "CONTAINER_VERBS",
    "DEFAULT_REGISTRY",
    "LEAF_VERBS",
    "UnknownVerbError",
    "VerbCapability",
    "VerbRegistry",
    "VerbSpec",
    "AttributesOnly",
    "NestedBody",
    "TextContent",
    "VerbUsageError",
    "dispatch",
    "invoke",
    "resolve_call",
]
