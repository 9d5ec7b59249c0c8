"""Ordered, append-only fragment storage.

One buffer collects the markup of a document; a second, independent buffer
collects the option records written on the side channel. Buffers live for a
single build and are disposed when it ends.
"""

from typing import Any, Iterable, List, Optional


class BufferDisposedError(RuntimeError):
    """Raised when a buffer is used after it has been disposed."""


class FragmentBuffer:
    """Append-only sequence of fragments kept in insertion order."""

    def __init__(self, initial: Optional[Iterable[Any]] = None, name: str = "markup") -> None:
        """Initialize the buffer.

        Args:
            initial: Fragments the buffer starts with (e.g. the XML declaration)
            name: Label used in error messages and logs
        """
        self.name = name
        self._fragments: Optional[List[Any]] = list(initial or [])

    @property
    def disposed(self) -> bool:
        """Whether the buffer has been released."""
        return self._fragments is None

    def _live(self) -> List[Any]:
        if self._fragments is None:
            raise BufferDisposedError(f"Buffer {self.name!r} has been disposed")
        return self._fragments

    def append(self, fragment: Any) -> None:
        """Add one fragment to the end of the buffer."""
        self._live().append(fragment)

    def snapshot(self) -> List[Any]:
        """Copy of the stored fragments in insertion order."""
        return list(self._live())

    def render(self) -> str:
        """Concatenate the stored fragments into one string."""
        return "".join(self._live())

    def dispose(self) -> None:
        """Release the stored fragments. Disposing twice is a no-op."""
        self._fragments = None

    def __len__(self) -> int:
        return len(self._live())

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else f"{len(self)} fragments"
        return f"FragmentBuffer(name={self.name!r}, {state})"
