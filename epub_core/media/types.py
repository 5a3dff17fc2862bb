"""
Media Types
===========

Media types that can occur inside an EPUB package and the lookup used to
classify a resource from its href.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class MediaType:
    """
    Content-type descriptor of a package entry.

    Attributes:
        name: MIME name (e.g., "application/xhtml+xml")
        default_extension: Extension used when generating hrefs
        extensions: All extensions mapped to this type, lower-case with dot
        is_text: Whether the content is character data with an encoding
    """
    name: str
    default_extension: str
    extensions: Tuple[str, ...]
    is_text: bool = False

    def __str__(self) -> str:
        return self.name


XHTML = MediaType("application/xhtml+xml", ".xhtml", (".xhtml", ".html", ".htm"), True)
EPUB = MediaType("application/epub+zip", ".epub", (".epub",))
NCX = MediaType("application/x-dtbncx+xml", ".ncx", (".ncx",), True)
OPF = MediaType("application/oebps-package+xml", ".opf", (".opf",), True)
JAVASCRIPT = MediaType("text/javascript", ".js", (".js",), True)
CSS = MediaType("text/css", ".css", (".css",), True)

JPG = MediaType("image/jpeg", ".jpg", (".jpg", ".jpeg"))
PNG = MediaType("image/png", ".png", (".png",))
GIF = MediaType("image/gif", ".gif", (".gif",))
SVG = MediaType("image/svg+xml", ".svg", (".svg",), True)

TTF = MediaType("application/x-truetype-font", ".ttf", (".ttf",))
OPENTYPE = MediaType("application/vnd.ms-opentype", ".otf", (".otf",))
WOFF = MediaType("application/font-woff", ".woff", (".woff",))

MP3 = MediaType("audio/mpeg", ".mp3", (".mp3",))
OGG = MediaType("audio/ogg", ".ogg", (".ogg",))
MP4 = MediaType("video/mp4", ".mp4", (".mp4",))

SMIL = MediaType("application/smil+xml", ".smil", (".smil",), True)
XPGT = MediaType("application/adobe-page-template+xml", ".xpgt", (".xpgt",), True)
PLS = MediaType("application/pls+xml", ".pls", (".pls",), True)

MEDIA_TYPES: Tuple[MediaType, ...] = (
    XHTML, EPUB, NCX, OPF, JAVASCRIPT, CSS,
    JPG, PNG, GIF, SVG,
    TTF, OPENTYPE, WOFF,
    MP3, OGG, MP4,
    SMIL, XPGT, PLS,
)

BITMAP_IMAGES: Tuple[MediaType, ...] = (JPG, PNG, GIF)

_BY_EXTENSION: Dict[str, MediaType] = {
    ext: media_type
    for media_type in MEDIA_TYPES
    for ext in media_type.extensions
}

_BY_NAME: Dict[str, MediaType] = {media_type.name: media_type for media_type in MEDIA_TYPES}


def _extension(href: str) -> str:
    # Strip fragment/query and any directory part before taking the suffix
    path = href.split("#", 1)[0].split("?", 1)[0]
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot <= 0:
        return ""
    return name[dot:].lower()


def determine_media_type(href: Optional[str]) -> Optional[MediaType]:
    """
    Resolve the media type of a package entry from its href.

    Args:
        href: Path of the entry inside the package (e.g., "text/ch01.xhtml")

    Returns:
        Matching MediaType, or None if the extension is unknown
    """
    if not href:
        return None
    return _BY_EXTENSION.get(_extension(href))


def get_media_type_by_name(name: str) -> Optional[MediaType]:
    """Look up a media type by its MIME name (case-insensitive)."""
    return _BY_NAME.get(name.strip().lower())


def is_bitmap_image(media_type: Optional[MediaType]) -> bool:
    """Return True for raster image types (JPEG, PNG, GIF)."""
    return media_type in BITMAP_IMAGES


def is_markup(media_type: Optional[MediaType]) -> bool:
    """Return True for (X)HTML content documents."""
    return media_type == XHTML
