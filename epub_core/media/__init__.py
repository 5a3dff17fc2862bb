"""
Media Types
===========

Media-type table and extension lookup for package entries.
"""

from epub_core.media.types import (
    MediaType,
    MEDIA_TYPES,
    XHTML,
    EPUB,
    NCX,
    OPF,
    JAVASCRIPT,
    CSS,
    JPG,
    PNG,
    GIF,
    SVG,
    TTF,
    OPENTYPE,
    WOFF,
    MP3,
    OGG,
    MP4,
    SMIL,
    XPGT,
    PLS,
    determine_media_type,
    get_media_type_by_name,
    is_bitmap_image,
    is_markup,
)

__all__ = [
    "MediaType",
    "MEDIA_TYPES",
    "XHTML",
    "EPUB",
    "NCX",
    "OPF",
    "JAVASCRIPT",
    "CSS",
    "JPG",
    "PNG",
    "GIF",
    "SVG",
    "TTF",
    "OPENTYPE",
    "WOFF",
    "MP3",
    "OGG",
    "MP4",
    "SMIL",
    "XPGT",
    "PLS",
    "determine_media_type",
    "get_media_type_by_name",
    "is_bitmap_image",
    "is_markup",
]
