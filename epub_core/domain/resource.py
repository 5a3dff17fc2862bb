"""
Resource
========

A single entry of an EPUB package: an XHTML document, stylesheet, image,
font, etc.

Content is held in one of two states:

- ``Loaded``: the bytes are in memory and authoritative. ``origin`` records
  the store entry they were read from, if any, so they can be released.
- ``Deferred``: only a store reference and the recorded length are known;
  every ``get_data`` call reads the entry from the store.

Resources are not internally synchronized. A resource must be used by one
worker at a time; different resources backed by the same store can be read
concurrently.
"""

import io
from dataclasses import dataclass
from typing import BinaryIO, Optional, TextIO, Union
import logging

from epub_core.encoding.detector import DEFAULT_ENCODING, DEFAULT_PREFIX_SIZE, open_text_stream
from epub_core.errors import ResourceIOError, ShortRead, StoreUnavailable
from epub_core.media.types import MediaType, determine_media_type
from epub_core.store.base import ResourceStore

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class Deferred:
    """Content that lives in an external store and is read on demand."""
    store: ResourceStore
    reference: str
    length: int


@dataclass(frozen=True)
class Loaded:
    """Content held in memory; ``origin`` is set when it can be reloaded."""
    data: bytes
    origin: Optional[Deferred] = None


ContentState = Union[Loaded, Deferred]


class Resource:
    """
    Addressable entry of a package.

    Two resources are equal when their hrefs are equal, regardless of
    content.

    Example:
        chapter = Resource(b"<html>...</html>", "text/ch01.xhtml")
        cover = Resource.lazy(store, "OEBPS/cover.jpg", 48213, "cover.jpg")
        cover.get_size()   # 48213, nothing read yet
        cover.get_data()   # reads the entry from the store
    """

    def __init__(self,
                 data: bytes = b"",
                 href: str = "",
                 media_type: Optional[MediaType] = None,
                 id: Optional[str] = None,
                 input_encoding: Optional[str] = DEFAULT_ENCODING,
                 log: Optional[logging.Logger] = None):
        """
        Create a resource whose content is already in memory.

        Args:
            data: The resource's content
            href: Location inside the package (e.g., "text/chapter1.xhtml")
            media_type: Media type; resolved from the href extension if None
            id: Identifier; assigned by the owning collection if None
            input_encoding: Encoding of text content (None for binaries)
            log: Logger for diagnostics (defaults to the module logger)
        """
        self.id = id
        self.href = href
        self.media_type = media_type if media_type is not None else determine_media_type(href)
        self.input_encoding = input_encoding
        self.log = log or logger
        self._content: ContentState = Loaded(bytes(data))
        self._title: Optional[str] = None
        self._title_resolved = False

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @classmethod
    def lazy(cls,
             store: ResourceStore,
             reference: str,
             length: int,
             href: str,
             **kwargs) -> 'Resource':
        """
        Create a resource without reading its content.

        Args:
            store: Store holding the entry
            reference: Name of the entry in the store
            length: Recorded size of the entry in bytes
            href: Location inside the package
            **kwargs: Passed to the constructor (media_type, id, ...)
        """
        resource = cls(b"", href, **kwargs)
        resource._content = Deferred(store, reference, length)
        return resource

    @classmethod
    def from_stream(cls,
                    stream: BinaryIO,
                    href: str,
                    length: int,
                    store: Optional[ResourceStore] = None,
                    reference: Optional[str] = None,
                    **kwargs) -> 'Resource':
        """
        Create a resource by copying ``length`` bytes from a stream.

        If the stream ends early and a store reference was given, the
        resource falls back to lazy loading from the store instead.

        Raises:
            ShortRead: If the stream ends early and there is no store
        """
        chunks = []
        remaining = length
        while remaining > 0:
            chunk = stream.read(min(remaining, _COPY_CHUNK_SIZE))
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)

        origin = Deferred(store, reference, length) if store is not None and reference else None

        if len(data) < length:
            if origin is None:
                raise ShortRead(href, length, len(data))
            (kwargs.get("log") or logger).info(
                f"Stream for {href} ended after {len(data)} of {length} bytes; loading lazily"
            )
            return cls.lazy(store, reference, length, href, **kwargs)

        resource = cls(b"", href, **kwargs)
        resource._content = Loaded(data, origin)
        return resource

    @classmethod
    def from_reader(cls, reader: TextIO, href: str, **kwargs) -> 'Resource':
        """Create a text resource from a character stream, stored as UTF-8."""
        data = reader.read().encode("utf-8")
        kwargs.setdefault("input_encoding", DEFAULT_ENCODING)
        return cls(data, href, **kwargs)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    @property
    def content_state(self) -> ContentState:
        """Current content state (Loaded or Deferred)."""
        return self._content

    def get_data(self) -> bytes:
        """
        Return the content of the resource.

        For a deferred resource the entry is read from the store on every
        call; the result is not kept.

        Raises:
            StoreUnavailable: If the store cannot be opened or read
            ShortRead: If the store returns fewer bytes than recorded
        """
        content = self._content
        if isinstance(content, Loaded):
            return content.data
        return self._load(content)

    def _load(self, deferred: Deferred) -> bytes:
        self.log.debug(f"Loading {self.href} from {deferred.store.describe()}")
        try:
            stream = deferred.store.open(deferred.reference)
        except ResourceIOError:
            raise
        except OSError as e:
            raise StoreUnavailable(f"Cannot open '{deferred.reference}': {e}") from e

        try:
            data = deferred.store.read(stream, deferred.length)
        except ResourceIOError:
            raise
        except OSError as e:
            raise StoreUnavailable(f"Cannot read '{deferred.reference}': {e}") from e
        finally:
            deferred.store.close(stream)

        if len(data) < deferred.length:
            raise ShortRead(deferred.reference, deferred.length, len(data))
        return data

    def restore(self, state: ContentState) -> None:
        """Put back a state previously taken from :attr:`content_state`."""
        self._content = state

    def set_data(self, data: bytes) -> None:
        """
        Replace the content with in-memory bytes.

        The caller is responsible for updating ``media_type`` if the new
        content is of a different type.
        """
        self._content = Loaded(bytes(data))

    def release(self) -> None:
        """
        Drop in-memory content that can be reloaded from the store.

        No-op for resources whose content did not come from a store.
        """
        content = self._content
        if isinstance(content, Loaded) and content.origin is not None:
            self._content = content.origin

    def is_initialized(self) -> bool:
        """Return True if the content is currently held in memory."""
        return isinstance(self._content, Loaded)

    def get_size(self) -> int:
        """Size in bytes; does not load deferred content."""
        content = self._content
        if isinstance(content, Loaded):
            return len(content.data)
        return content.length

    def get_input_stream(self) -> BinaryIO:
        """Return the content as a binary stream."""
        return io.BytesIO(self.get_data())

    def get_reader(self,
                   prefix_size: int = DEFAULT_PREFIX_SIZE,
                   errors: str = "replace") -> TextIO:
        """
        Return the content as a character stream.

        The encoding is taken from a byte-order mark or the document's own
        declaration when present, otherwise ``input_encoding`` is used.
        Bytes that are invalid in that encoding become U+FFFD unless
        ``errors`` is "strict".
        """
        return open_text_stream(self.get_data(), self.input_encoding, prefix_size, errors, log=self.log)

    # ------------------------------------------------------------------
    # Title
    # ------------------------------------------------------------------

    @property
    def title(self) -> Optional[str]:
        """Title found by scanning the document, or set explicitly."""
        return self._title

    @title.setter
    def title(self, value: Optional[str]) -> None:
        self._title = value
        self._title_resolved = value is not None

    @property
    def title_resolved(self) -> bool:
        """True once a title has been set or a scan has completed."""
        return self._title_resolved

    def memoize_title(self, value: Optional[str]) -> Optional[str]:
        """Store the outcome of a title scan, including "not found" (None)."""
        self._title = value
        self._title_resolved = True
        return value

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self.href == other.href

    def __hash__(self) -> int:
        return hash(self.href)

    def __repr__(self) -> str:
        content = self._content
        size = len(content.data) if isinstance(content, Loaded) else 0
        return (
            f"Resource(id={self.id!r}, title={self._title!r}, "
            f"encoding={self.input_encoding!r}, media_type={self.media_type}, "
            f"href={self.href!r}, size={size})"
        )
