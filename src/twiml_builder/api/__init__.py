"""Public API for building TwiML documents.

This module provides the document building entry points and the adapters
that hand finished documents to XML libraries and web frameworks.
"""

from .document import DocumentStateError, TwimlDocument, build

__all__ = [
    "DocumentStateError",
    "TwimlDocument",
    "build",
]
