"""
Resource Store Interface
========================

Abstract access to the container a package was read from. Lazy resources
keep only a store and an entry reference; every read opens the entry,
reads it and closes it again, so no handle outlives a single call.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO
import logging

from epub_core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class ResourceStore(ABC):
    """
    Abstract base class for external resource stores.

    Implementations must allow several independent ``open`` calls on the
    same store to be in flight at once (one per worker).

    Example:
        class MemoryStore(ResourceStore):
            def __init__(self, entries):
                self.entries = entries

            def open(self, reference):
                return io.BytesIO(self.entries[reference])
    """

    @abstractmethod
    def open(self, reference: str) -> BinaryIO:
        """
        Open an entry for reading.

        Args:
            reference: Name of the entry inside the store

        Returns:
            Binary stream positioned at the start of the entry

        Raises:
            StoreUnavailable: If the store or the entry cannot be opened
        """
        pass

    def read(self, stream: BinaryIO, length: int) -> bytes:
        """
        Read up to ``length`` bytes, looping over partial reads.

        Returns fewer bytes only when the entry ends early.
        """
        chunks = []
        remaining = length
        try:
            while remaining > 0:
                chunk = stream.read(remaining)
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        except OSError as e:
            raise StoreUnavailable(f"Read failed in {self.describe()}: {e}") from e
        return b"".join(chunks)

    def close(self, stream: BinaryIO) -> None:
        """Close a stream returned by :meth:`open`."""
        try:
            stream.close()
        except OSError as e:
            logger.warning(f"Failed to close stream from {self.describe()}: {e}")

    def describe(self) -> str:
        """Return a short human-readable description for messages."""
        return self.__class__.__name__
