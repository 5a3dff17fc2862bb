"""
Exceptions
==========

Exception hierarchy shared by every epub_core module.

Third-party failures (lxml, zipfile, OS errors) are translated into these
types at the module boundary; the original exception is always chained.
"""


class EpubCoreError(Exception):
    """Base error for all epub_core exceptions."""


class ConfigurationError(EpubCoreError):
    """Raised when configuration is invalid or incomplete."""


class ResourceIOError(EpubCoreError, OSError):
    """Raised when the content of a resource cannot be read."""


class StoreUnavailable(ResourceIOError):
    """Raised when the external store cannot be opened or read."""


class ShortRead(ResourceIOError):
    """Raised when the store returns fewer bytes than the recorded length."""

    def __init__(self, reference: str, expected: int, actual: int):
        super().__init__(
            f"Short read from '{reference}': expected {expected} bytes, got {actual}"
        )
        self.reference = reference
        self.expected = expected
        self.actual = actual


class TransformError(EpubCoreError):
    """Raised when a resource cannot be transformed."""


class MalformedMarkup(TransformError):
    """Raised when resource markup cannot be decoded or parsed."""


class TransformFailure(TransformError):
    """Raised when the stylesheet fails while being applied to a document."""


class InvalidProgram(EpubCoreError):
    """Raised when a stylesheet cannot be compiled."""
