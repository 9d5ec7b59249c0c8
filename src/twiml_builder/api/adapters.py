"""Integration adapters for handing built documents to other libraries.

This module converts build output (a markup string, or an ``(options,
markup)`` pair) into lxml and ElementTree element trees for inspection, and
into Flask responses for webhook handlers, and back again. Adapters never
raise on conversion failure; they return an unsuccessful ConversionResult
carrying an error diagnostic.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Type

from twiml_builder.markup import xml_declaration
from twiml_builder.shared import (
    BuildOutput,
    DiagnosticEntry,
    DiagnosticSeverity,
    get_logger,
    split_output,
)

MS_PER_SECOND = 1000
TWIML_MIMETYPE = "application/xml"


class AdapterType(Enum):
    """Types of integration adapters."""

    XML_LIBRARY = auto()     # Element tree libraries (lxml, ElementTree)
    WEB_FRAMEWORK = auto()   # Web frameworks serving TwiML webhooks


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    version: str
    adapter_type: AdapterType
    target_library: str
    supported_versions: List[str]
    description: str


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)


class AdapterPerformanceProfiler:
    """Keeps recent conversion timings per adapter."""

    max_samples = 1000

    def __init__(self) -> None:
        self._metrics: Dict[str, List[float]] = {}
        self._lock = threading.RLock()

    def record_conversion(self, adapter_name: str, conversion_time_ms: float) -> None:
        """Record conversion performance."""
        with self._lock:
            samples = self._metrics.setdefault(adapter_name, [])
            samples.append(conversion_time_ms)
            if len(samples) > self.max_samples:
                del samples[:-self.max_samples]

    def get_statistics(self, adapter_name: str) -> Dict[str, float]:
        """Get performance statistics for an adapter."""
        with self._lock:
            times = self._metrics.get(adapter_name)
            if not times:
                return {}
            return {
                "count": len(times),
                "average_ms": sum(times) / len(times),
                "min_ms": min(times),
                "max_ms": max(times),
                "total_ms": sum(times),
            }


class IntegrationAdapter(ABC):
    """Abstract base class for all integration adapters.

    Subclasses implement ``_to_target`` and ``_from_target``; the public
    methods add timing, logging and error capture around them.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the integration adapter.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)
        self._profiler = AdapterPerformanceProfiler()

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library can be imported."""

    @abstractmethod
    def _to_target(self, markup: str) -> Any:
        """Convert document markup to the target representation."""

    @abstractmethod
    def _from_target(self, target_data: Any) -> str:
        """Convert the target representation back to document markup."""

    def to_target(self, output: BuildOutput) -> ConversionResult:
        """Convert build output to the target representation.

        Args:
            output: Markup string or ``(options, markup)`` pair from ``build``

        Returns:
            ConversionResult containing the converted data
        """
        start_time = time.time()
        try:
            options, markup = split_output(output)
            converted = self._to_target(markup)
        except Exception as e:
            return self._create_error_result(
                f"Failed to convert to {self.metadata.target_library}: {e}",
                output,
                start_time,
            )

        processing_time = self._elapsed(start_time)
        self._profiler.record_conversion(self.metadata.name, processing_time)
        return ConversionResult(
            success=True,
            converted_data=converted,
            original_data=output,
            conversion_time_ms=processing_time,
            metadata={"markup_length": len(markup), "option_count": len(options)},
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        """Convert a target representation back to a markup string.

        Args:
            target_data: Data in the target representation

        Returns:
            ConversionResult containing the markup string
        """
        start_time = time.time()
        try:
            markup = self._from_target(target_data)
        except Exception as e:
            return self._create_error_result(
                f"Failed to convert from {self.metadata.target_library}: {e}",
                target_data,
                start_time,
            )

        processing_time = self._elapsed(start_time)
        self._profiler.record_conversion(self.metadata.name, processing_time)
        return ConversionResult(
            success=True,
            converted_data=markup,
            original_data=target_data,
            conversion_time_ms=processing_time,
            metadata={"markup_length": len(markup)},
        )

    def get_performance_stats(self) -> Dict[str, float]:
        """Get performance statistics for this adapter."""
        return self._profiler.get_statistics(self.metadata.name)

    @staticmethod
    def _elapsed(start_time: float) -> float:
        return (time.time() - start_time) * MS_PER_SECOND

    def _create_error_result(
        self, error_message: str, original_data: Any, start_time: float
    ) -> ConversionResult:
        self._logger.warning(error_message, extra={"adapter": self.metadata.name})
        return ConversionResult(
            success=False,
            converted_data=None,
            original_data=original_data,
            conversion_time_ms=self._elapsed(start_time),
            errors=[error_message],
            diagnostics=[
                DiagnosticEntry(
                    severity=DiagnosticSeverity.ERROR,
                    message=error_message,
                    component=self.__class__.__name__,
                    correlation_id=self.correlation_id,
                )
            ],
        )


class AdapterRegistry:
    """Registry for managing integration adapters."""

    def __init__(self) -> None:
        self._adapters: Dict[str, Type[IntegrationAdapter]] = {}
        self._lock = threading.RLock()

    def register(self, adapter_class: Type[IntegrationAdapter]) -> None:
        """Register an adapter class under its metadata name."""
        with self._lock:
            self._adapters[adapter_class().metadata.name] = adapter_class

    def get_adapter(
        self, adapter_name: str, correlation_id: Optional[str] = None
    ) -> Optional[IntegrationAdapter]:
        """Get an adapter instance by name.

        Returns:
            Adapter instance if registered and available, None otherwise
        """
        with self._lock:
            adapter_class = self._adapters.get(adapter_name)
        if adapter_class is None:
            return None
        instance = adapter_class(correlation_id)
        return instance if instance.is_available() else None

    def list_available_adapters(self) -> List[AdapterMetadata]:
        """List metadata of every registered adapter whose library is installed."""
        with self._lock:
            classes = list(self._adapters.values())
        instances = [adapter_class() for adapter_class in classes]
        return [instance.metadata for instance in instances if instance.is_available()]

    def get_adapters_by_type(self, adapter_type: AdapterType) -> List[str]:
        """Get names of available adapters of the given type."""
        return [
            metadata.name
            for metadata in self.list_available_adapters()
            if metadata.adapter_type == adapter_type
        ]


_adapter_registry = AdapterRegistry()


def register_adapter(adapter_class: Type[IntegrationAdapter]) -> None:
    """Register an integration adapter globally."""
    _adapter_registry.register(adapter_class)


def get_adapter(
    adapter_name: str, correlation_id: Optional[str] = None
) -> Optional[IntegrationAdapter]:
    """Get a registered adapter instance, or None if it is unknown or unavailable."""
    return _adapter_registry.get_adapter(adapter_name, correlation_id)


def list_available_adapters() -> List[AdapterMetadata]:
    """List all available integration adapters."""
    return _adapter_registry.list_available_adapters()


def get_adapters_by_type(adapter_type: AdapterType) -> List[str]:
    """Get adapter names by type."""
    return _adapter_registry.get_adapters_by_type(adapter_type)


def _with_declaration(body: str) -> str:
    return xml_declaration() + body


# XML Library Adapters
class LxmlAdapter(IntegrationAdapter):
    """Adapter for conversion to and from lxml.etree elements."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="lxml",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="lxml",
            supported_versions=["4.0+"],
            description="Parse built TwiML into lxml.etree elements and back",
        )

    def is_available(self) -> bool:
        try:
            import lxml.etree  # noqa: F401
        except ImportError:
            return False
        return True

    def _to_target(self, markup: str) -> Any:
        from lxml import etree

        # lxml rejects str input carrying an encoding declaration
        return etree.fromstring(markup.encode("utf-8"))

    def _from_target(self, target_data: Any) -> str:
        from lxml import etree

        if not etree.iselement(target_data):
            raise TypeError("Target data is not an lxml element")
        return _with_declaration(etree.tostring(target_data, encoding="unicode"))


class ElementTreeAdapter(IntegrationAdapter):
    """Adapter for conversion to and from xml.etree.ElementTree elements."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="elementtree",
            version="1.0.0",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="xml.etree.ElementTree",
            supported_versions=["3.8+"],
            description="Parse built TwiML into ElementTree elements and back",
        )

    def is_available(self) -> bool:
        return True

    def _to_target(self, markup: str) -> Any:
        import xml.etree.ElementTree as ET

        return ET.fromstring(markup.encode("utf-8"))

    def _from_target(self, target_data: Any) -> str:
        import xml.etree.ElementTree as ET

        if not isinstance(target_data, ET.Element):
            raise TypeError("Target data is not an ElementTree element")
        return _with_declaration(ET.tostring(target_data, encoding="unicode"))


# Web Framework Adapters
class FlaskAdapter(IntegrationAdapter):
    """Adapter wrapping built TwiML in a Flask response for webhook handlers."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="flask",
            version="1.0.0",
            adapter_type=AdapterType.WEB_FRAMEWORK,
            target_library="flask",
            supported_versions=["2.0+"],
            description="Flask Response objects carrying TwiML documents",
        )

    def is_available(self) -> bool:
        try:
            import flask  # noqa: F401
        except ImportError:
            return False
        return True

    def _to_target(self, markup: str) -> Any:
        from flask import Response

        return Response(markup, mimetype=TWIML_MIMETYPE)

    def _from_target(self, target_data: Any) -> str:
        if not hasattr(target_data, "get_data"):
            raise TypeError("Target data is not a Flask Response")
        return target_data.get_data(as_text=True)


register_adapter(LxmlAdapter)
register_adapter(ElementTreeAdapter)
register_adapter(FlaskAdapter)
