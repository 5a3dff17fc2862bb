"""
Package Domain
==============

Resources, their collection and title extraction.
"""

from epub_core.domain.resource import (
    Resource,
    Loaded,
    Deferred,
    ContentState,
)

from epub_core.domain.titles import (
    scan_title,
    find_title,
    get_title,
)

from epub_core.domain.collection import (
    ResourceCollection,
    is_valid_id,
    make_valid_id,
)

__all__ = [
    "Resource",
    "Loaded",
    "Deferred",
    "ContentState",
    "scan_title",
    "find_title",
    "get_title",
    "ResourceCollection",
    "is_valid_id",
    "make_valid_id",
]
