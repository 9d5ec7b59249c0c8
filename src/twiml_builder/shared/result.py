"""Result objects and diagnostic types for TwiML document building.

This module defines the records a build hands back to its caller next to the
markup string: menu option records, build metrics and diagnostic entries.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


class OptionRecord(NamedTuple):
    """A menu option recorded on the side channel of a build.

    Compares equal to the plain ``(discriminator, menu_attributes)`` tuple.
    """

    discriminator: Any
    menu_attributes: Any


# What ``build`` hands back: the markup alone, or the options with it
BuildOutput = Union[str, Tuple[List[OptionRecord], str]]


@dataclass
class BuildMetrics:
    """Counters collected while a single document is composed."""

    fragments_written: int = 0
    options_recorded: int = 0
    max_depth: int = 0
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to a flat dictionary for structured logging."""
        return {
            "fragments_written": self.fragments_written,
            "options_recorded": self.options_recorded,
            "max_depth": self.max_depth,
            "processing_time_ms": self.processing_time_ms,
        }


def split_output(output: BuildOutput) -> Tuple[List[OptionRecord], str]:
    """Normalize either build output shape into ``(options, markup)``."""
    if isinstance(output, str):
        return [], output
    if isinstance(output, tuple) and len(output) == 2 and isinstance(output[1], str):
        options, markup = output
        return list(options), markup
    raise TypeError(
        f"Expected a markup string or an (options, markup) pair, "
        f"got {type(output).__name__}"
    )
