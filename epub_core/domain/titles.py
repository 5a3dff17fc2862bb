"""
Title Extraction
================

Finds a human-readable title for a content document by scanning its markup
for the first ``<title>`` or ``<h1>``..``<h7>`` tag.

The scan works on the decoded character stream and stops at the first
matching tag, so large documents are usually read only partially.
"""

import html
import logging
import re
from typing import Iterator, List, Optional, TextIO

from epub_core.domain.resource import Resource
from epub_core.encoding.detector import DEFAULT_PREFIX_SIZE
from epub_core.errors import ResourceIOError
from epub_core.media.types import is_markup

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192

_TAG_NAME = re.compile(r"\s*([^\s/>]*)")
_HEADING = re.compile(r"h[1-7]", re.IGNORECASE)


def _iter_segments(reader: TextIO, chunk_size: int) -> Iterator[str]:
    """Yield the text between consecutive '<' characters."""
    pending: List[str] = []
    first = True
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            break
        parts = chunk.split("<")
        pending.append(parts[0])
        for part in parts[1:]:
            segment = "".join(pending)
            pending = [part]
            if first:
                # Text before the first tag
                first = False
                continue
            yield segment
    if not first:
        yield "".join(pending)


def _is_title_tag(tag: str) -> bool:
    name = _TAG_NAME.match(tag).group(1)
    return name.lower() == "title" or _HEADING.fullmatch(name) is not None


def scan_title(reader: TextIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Optional[str]:
    """
    Return the text of the first title or heading tag in a markup stream.

    Args:
        reader: Decoded markup
        chunk_size: Number of characters read per step

    Returns:
        Trimmed, entity-decoded title text; "" for an empty tag; None if
        the document has no title or heading tag
    """
    for segment in _iter_segments(reader, chunk_size):
        close_pos = segment.find(">")
        if close_pos < 0:
            continue
        if _is_title_tag(segment[:close_pos]):
            return html.unescape(segment[close_pos + 1:].strip())
    return None


def find_title(resource: Resource,
               chunk_size: int = DEFAULT_CHUNK_SIZE,
               log: Optional[logging.Logger] = None,
               prefix_size: int = DEFAULT_PREFIX_SIZE) -> Optional[str]:
    """
    Find and memoize the title of a resource.

    A title that is already set (or a previous scan result) is returned
    without scanning. Non-markup resources return their href.

    Read or decoding errors are logged and reported as "not found"; in that
    case nothing is memoized.

    Args:
        resource: Resource to inspect
        chunk_size: Number of characters read per scan step
        log: Logger for diagnostics (defaults to the module logger)
        prefix_size: Bytes inspected for an encoding declaration

    Returns:
        The title, the href for non-markup resources, or None
    """
    log = log or logger
    if resource.title_resolved:
        return resource.title
    if not is_markup(resource.media_type):
        return resource.href

    try:
        with resource.get_reader(prefix_size) as reader:
            title = scan_title(reader, chunk_size)
    except (ResourceIOError, OSError, UnicodeDecodeError) as e:
        log.error(f"Could not scan {resource.href} for a title: {e}")
        return None

    return resource.memoize_title(title)


def get_title(resource: Optional[Resource]) -> str:
    """
    Return a display title for a resource, never None.

    Missing resources and documents without a title yield "".
    """
    if resource is None:
        return ""
    return find_title(resource) or ""
