"""
Encoding Detection
==================

Decodes the bytes of a text resource into a character stream, working out
the real character encoding from the content itself rather than trusting
the encoding recorded for the resource.

Resolution order:

1. Byte-order mark at the start of the stream
2. Encoding declaration in a bounded prefix of the document
   (``<?xml ... encoding="..."?>``, then ``<meta charset=...>``)
3. The caller's hint, falling back to UTF-8

The prefix inspected in step 2 is replayed into the returned stream, so the
reader sees the complete document exactly once.
"""

import codecs
import io
import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, TextIO, Tuple, Union

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "UTF-8"
DEFAULT_PREFIX_SIZE = 4096

# Longest signatures first: the UTF-32 LE mark starts with the UTF-16 LE one
_BOMS: List[Tuple[bytes, str]] = [
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
]

# "<?" written in a 16-bit encoding without a byte-order mark
_UTF16_SIGNATURES: List[Tuple[bytes, str]] = [
    (b"<\x00?\x00", "utf-16-le"),
    (b"\x00<\x00?", "utf-16-be"),
]

_XML_DECLARATION = re.compile(
    r"""^\s*<\?xml[^>]*?encoding\s*=\s*["']([A-Za-z][A-Za-z0-9._\-]*)["']""",
)
_META_CHARSET = re.compile(
    r"""<meta[^>]*?charset\s*=\s*["']?\s*([A-Za-z][A-Za-z0-9._\-]*)""",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class EncodingDetection:
    """
    Outcome of encoding detection.

    Attributes:
        encoding: Python codec name used for decoding
        source: Where the encoding came from: "bom", "declaration" or "hint"
        bom_length: Number of leading bytes to skip before decoding
    """
    encoding: str
    source: str
    bom_length: int = 0


def _lookup(name: Optional[str]) -> Optional[str]:
    """Return the canonical codec name, or None if Python has no such codec."""
    if not name:
        return None
    try:
        return codecs.lookup(name).name
    except LookupError:
        return None


def _find_declaration(text: str) -> Optional[str]:
    match = _XML_DECLARATION.search(text)
    if match:
        return match.group(1)
    match = _META_CHARSET.search(text)
    if match:
        return match.group(1)
    return None


def detect_encoding(prefix: bytes,
                    hint: Optional[str] = None,
                    log: Optional[logging.Logger] = None) -> EncodingDetection:
    """
    Determine the encoding of a document from its first bytes.

    Args:
        prefix: Leading bytes of the document
        hint: Encoding recorded for the resource, used as the fallback
        log: Logger for diagnostics (defaults to the module logger)

    Returns:
        EncodingDetection describing the chosen codec
    """
    log = log or logger

    for bom, encoding in _BOMS:
        if prefix.startswith(bom):
            return EncodingDetection(encoding, "bom", len(bom))

    for signature, encoding in _UTF16_SIGNATURES:
        if prefix.startswith(signature):
            # Declaration can't change code-unit width; byte order decides
            return EncodingDetection(encoding, "declaration")

    declared = _find_declaration(prefix.decode("latin-1"))
    if declared:
        codec = _lookup(declared)
        if codec is None:
            log.warning(f"Ignoring unknown declared encoding: {declared}")
        elif codec.startswith(("utf-16", "utf-32", "utf_16", "utf_32")):
            log.warning(f"Ignoring declared encoding {declared} without byte-order mark")
        else:
            return EncodingDetection(codec, "declaration")

    codec = _lookup(hint)
    if codec is None:
        if hint:
            log.warning(f"Unknown hinted encoding {hint}, using {DEFAULT_ENCODING}")
        codec = _lookup(DEFAULT_ENCODING)
    return EncodingDetection(codec, "hint")


class _ReplayStream(io.RawIOBase):
    """Raw stream that returns an already-read prefix before the rest of a source."""

    def __init__(self, prefix: bytes, rest: BinaryIO):
        self._prefix = memoryview(prefix)
        self._pos = 0
        self._rest = rest

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        remaining = len(self._prefix) - self._pos
        if remaining > 0:
            n = min(len(buffer), remaining)
            buffer[:n] = self._prefix[self._pos:self._pos + n]
            self._pos += n
            return n
        data = self._rest.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        return n

    def close(self) -> None:
        try:
            self._rest.close()
        finally:
            super().close()


def _read_prefix(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def open_text_stream(source: Union[bytes, BinaryIO],
                     hint: Optional[str] = None,
                     prefix_size: int = DEFAULT_PREFIX_SIZE,
                     errors: str = "strict",
                     log: Optional[logging.Logger] = None) -> TextIO:
    """
    Wrap a byte source in a character stream with the detected encoding.

    Multi-byte sequences split across the end of the inspected prefix are
    decoded correctly because the returned stream uses an incremental
    decoder over the replayed bytes.

    Args:
        source: Raw document bytes or a binary file object
        hint: Fallback encoding when the content declares none
        prefix_size: Number of bytes inspected for a declaration
        errors: Codec error handler passed to the text wrapper
        log: Logger for diagnostics (defaults to the module logger)

    Returns:
        Text stream positioned at the first character (after any BOM)
    """
    stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    prefix = _read_prefix(stream, prefix_size)
    detection = detect_encoding(prefix, hint, log)
    (log or logger).debug(
        f"Decoding as {detection.encoding} (from {detection.source})"
    )

    raw = _ReplayStream(prefix[detection.bom_length:], stream)
    return io.TextIOWrapper(
        io.BufferedReader(raw),
        encoding=detection.encoding,
        errors=errors,
        newline="",
    )


def decode_bytes(data: bytes,
                 hint: Optional[str] = None,
                 prefix_size: int = DEFAULT_PREFIX_SIZE) -> str:
    """Decode a complete document to a string using detect_encoding rules."""
    with open_text_stream(data, hint, prefix_size) as reader:
        return reader.read()
