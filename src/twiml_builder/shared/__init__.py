"""Shared utilities for TwiML document building.

This module provides the configuration objects, result types and logging
helpers used across the markup, verb and API layers.
"""

from .config import (
    BuilderConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    SerializationConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    BuildMetrics,
    BuildOutput,
    DiagnosticEntry,
    DiagnosticSeverity,
    OptionRecord,
    split_output,
)

__all__ = [
    "BuilderConfig",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "SerializationConfig",
    "CorrelationLogger",
    "get_logger",
    "BuildMetrics",
    "BuildOutput",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "OptionRecord",
    "split_output",
]
