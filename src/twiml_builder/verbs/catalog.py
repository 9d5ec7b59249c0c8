"""Verb catalog: which TwiML verbs exist and whether they can nest.

The markup engine does not care what a verb means. It only needs to know,
for each verb name, whether the verb is a leaf (text or attributes only) or a
container (may hold nested verbs). That classification lives in a single
static table, consulted by the generic dispatcher in ``dispatch``.
"""

import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, Iterator, List, Optional


class VerbCapability(Enum):
    """Whether a verb may contain nested verbs."""

    LEAF = auto()         # Text content or attributes only
    CONTAINER = auto()    # May wrap a nested composition


class UnknownVerbError(KeyError):
    """Raised when a verb name has no catalog entry."""


@dataclass(frozen=True)
class VerbSpec:
    """Catalog entry for a single verb."""

    name: str
    capability: VerbCapability

    def __post_init__(self) -> None:
        """Validate verb specification."""
        if not self.name:
            raise ValueError("Verb name cannot be empty")
        if not isinstance(self.capability, VerbCapability):
            raise ValueError("Verb capability must be a VerbCapability")

    @property
    def is_container(self) -> bool:
        return self.capability is VerbCapability.CONTAINER


CONTAINER_VERBS = ("gather", "dial", "message")

LEAF_VERBS = (
    "say", "number", "play", "sms", "sip", "client", "conference", "queue",
    "enqueue", "leave", "hangup", "reject", "pause", "record", "redirect",
    "body", "media",
)


class VerbRegistry:
    """Mapping from verb name to its catalog entry.

    Registration is guarded by a lock so a registry can be extended while
    other threads build documents against it.
    """

    def __init__(self, specs: Optional[Iterable[VerbSpec]] = None) -> None:
        self._specs: Dict[str, VerbSpec] = {}
        self._lock = threading.RLock()
        for spec in specs or ():
            self._add(spec)

    def _add(self, spec: VerbSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Verb {spec.name!r} is already registered")
        self._specs[spec.name] = spec

    def register(
        self, name: str, capability: VerbCapability = VerbCapability.LEAF
    ) -> VerbSpec:
        """Add a verb to the registry.

        Args:
            name: snake_case verb identifier
            capability: Whether the verb may contain nested verbs

        Returns:
            The new catalog entry
        """
        spec = VerbSpec(name, capability)
        with self._lock:
            self._add(spec)
        return spec

    def get(self, name: str) -> VerbSpec:
        """Look up a verb, raising UnknownVerbError if it is not registered."""
        try:
            return self._specs[name]
        except KeyError:
            raise UnknownVerbError(name) from None

    def names(self) -> List[str]:
        return list(self._specs)

    def containers(self) -> List[str]:
        return [name for name, spec in self._specs.items() if spec.is_container]

    def leaves(self) -> List[str]:
        return [name for name, spec in self._specs.items() if not spec.is_container]

    def copy(self) -> "VerbRegistry":
        """Independent registry with the same entries, for local extension."""
        with self._lock:
            return VerbRegistry(self._specs.values())

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[VerbSpec]:
        return iter(list(self._specs.values()))

    def __len__(self) -> int:
        return len(self._specs)


DEFAULT_REGISTRY = VerbRegistry(
    [VerbSpec(name, VerbCapability.CONTAINER) for name in CONTAINER_VERBS]
    + [VerbSpec(name, VerbCapability.LEAF) for name in LEAF_VERBS]
)
