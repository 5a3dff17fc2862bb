"""
Encoding Detection
==================

Encoding-aware decoding of text resources.
"""

from epub_core.encoding.detector import (
    DEFAULT_ENCODING,
    DEFAULT_PREFIX_SIZE,
    EncodingDetection,
    detect_encoding,
    open_text_stream,
    decode_bytes,
)

__all__ = [
    "DEFAULT_ENCODING",
    "DEFAULT_PREFIX_SIZE",
    "EncodingDetection",
    "detect_encoding",
    "open_text_stream",
    "decode_bytes",
]
