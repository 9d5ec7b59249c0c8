"""Configuration classes for TwiML document building.

This module provides configuration objects for the serializer and the
document builder, with validation, presets and dictionary/JSON round-trips.
"""

import json
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

_SUPPORTED_XML_VERSIONS = ("1.0", "1.1")
_IDENTIFIER_PATTERN = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$")
_COMPONENTS = ("serialization", "global_")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class SerializationConfig:
    """Configuration for the document envelope and fragment serialization."""

    xml_version: str = "1.0"
    encoding: str = "UTF-8"
    root_tag: str = "response"

    # Off by default: text and attribute values are written verbatim
    escape_special_characters: bool = False

    def __post_init__(self) -> None:
        """Validate serialization configuration."""
        if self.xml_version not in _SUPPORTED_XML_VERSIONS:
            raise ValueError(
                f"xml_version must be one of {list(_SUPPORTED_XML_VERSIONS)}"
            )
        if not self.encoding or not self.encoding.strip():
            raise ValueError("encoding cannot be empty")
        if not _IDENTIFIER_PATTERN.match(self.root_tag or ""):
            raise ValueError("root_tag must be a snake_case identifier")


@dataclass
class GlobalConfig:
    """Settings that apply to every build."""

    enable_correlation_tracking: bool = True
    enable_build_metrics: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        for name in ("enable_correlation_tracking", "enable_build_metrics"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be a boolean")


@dataclass(frozen=True)
class BuilderConfig:
    """Complete configuration for building TwiML documents.

    Immutable, so a single instance can be shared by every build in a process.
    """

    serialization: SerializationConfig = field(default_factory=SerializationConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete builder configuration."""
        try:
            self.serialization.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "BuilderConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; nested fields use ``component__field``

        Returns:
            New BuilderConfig instance with overrides applied

        Example:
            >>> config = BuilderConfig()
            >>> escaped = config.override(
            ...     serialization__escape_special_characters=True
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for key, value in nested_overrides.items():
                if key in _COMPONENTS and isinstance(value, dict):
                    new_fields[key] = replace(getattr(self, key), **value)
                else:
                    new_fields[key] = value
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            "serialization": dict(vars(self.serialization)),
            "global_": dict(vars(self.global_)),
            "name": self.name,
            "description": self.description,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuilderConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than ignored.
        """
        try:
            return cls(
                serialization=SerializationConfig(**data.get("serialization", {})),
                global_=GlobalConfig(**data.get("global_", {})),
                name=data.get("name"),
                description=data.get("description"),
            )
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    @classmethod
    def from_json(cls, json_str: str) -> "BuilderConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "BuilderConfig":
        """Bit-exact compact output with metrics and correlation tracking."""
        return cls(name="default")

    @classmethod
    def escaped(cls) -> "BuilderConfig":
        """Escape XML special characters in text and attribute values."""
        return cls(
            serialization=SerializationConfig(escape_special_characters=True),
            name="escaped",
            description="Escapes &, < and > in text and quotes in attribute values",
        )

    @classmethod
    def minimal(cls) -> "BuilderConfig":
        """Skip metrics collection and correlation IDs."""
        return cls(
            global_=GlobalConfig(
                enable_correlation_tracking=False,
                enable_build_metrics=False,
            ),
            name="minimal",
            description="No metrics, no generated correlation IDs",
        )
