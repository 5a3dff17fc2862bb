"""
Resource Collection
===================

The set of resources of one package, keyed by href. The collection assigns
identifiers to resources that have none and owns their lifetime.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from epub_core.config.settings import ResourceConfig
from epub_core.domain.resource import Resource
from epub_core.media.types import is_bitmap_image
from epub_core.store.zip_store import ZipArchiveStore

logger = logging.getLogger(__name__)

IMAGE_ID_PREFIX = "image_"
ITEM_ID_PREFIX = "item_"

_NCNAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")
_INVALID_ID_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


def is_valid_id(value: Optional[str]) -> bool:
    """Check that a value is usable as an XML NCName identifier."""
    return bool(value) and _NCNAME.match(value) is not None


def make_valid_id(value: str) -> str:
    """
    Turn an arbitrary string into a valid identifier.

    Example:
        >>> make_valid_id("1 chapter")
        'x1_chapter'
    """
    cleaned = _INVALID_ID_CHARS.sub("_", value)
    if not cleaned or not re.match(r"[A-Za-z_]", cleaned[0]):
        cleaned = "x" + cleaned
    return cleaned


class ResourceCollection:
    """
    Resources of a package keyed by href.

    Example:
        resources = ResourceCollection.from_zip(Path("book.epub"))
        chapter = resources.get_by_href("OEBPS/ch01.xhtml")
        resources.release_all()
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self._resources: Dict[str, Resource] = {}
        self._last_id = 0

    @classmethod
    def from_zip(cls,
                 archive_path: Union[str, Path],
                 config: Optional[ResourceConfig] = None,
                 log: Optional[logging.Logger] = None) -> 'ResourceCollection':
        """
        Build a collection of lazy resources for every entry of an archive.

        Nothing but the archive's directory is read; sizes come from the
        recorded uncompressed sizes. Text resources are assumed to be in
        ``config.default_encoding`` unless their content says otherwise.

        Raises:
            StoreUnavailable: If the archive cannot be opened
        """
        config = config or ResourceConfig()
        store = ZipArchiveStore(archive_path)
        collection = cls(log)
        for name, size in store.entries():
            collection.add(Resource.lazy(
                store, name, size, name,
                input_encoding=config.default_encoding,
                log=log,
            ))
        collection.log.info(f"Indexed {len(collection)} resources from {archive_path}")
        return collection

    def _next_id(self, resource: Resource) -> str:
        prefix = IMAGE_ID_PREFIX if is_bitmap_image(resource.media_type) else ITEM_ID_PREFIX
        while True:
            self._last_id += 1
            candidate = f"{prefix}{self._last_id}"
            if self.get_by_id(candidate) is None:
                return candidate

    def _fix_id(self, resource: Resource) -> None:
        if resource.id and not is_valid_id(resource.id):
            resource.id = make_valid_id(resource.id)
        existing = self.get_by_id(resource.id) if resource.id else None
        if not resource.id or (existing is not None and existing is not resource):
            resource.id = self._next_id(resource)

    def add(self, resource: Resource) -> Resource:
        """
        Add a resource, replacing any resource with the same href.

        The id is repaired or generated when missing, invalid or already
        used by another resource.
        """
        if not resource.href:
            raise ValueError("Resource must have an href to be added to a collection")
        self._resources.pop(resource.href, None)
        self._fix_id(resource)
        self._resources[resource.href] = resource
        return resource

    def get_by_href(self, href: str) -> Optional[Resource]:
        """Return the resource at href, ignoring any '#fragment'."""
        return self._resources.get(href.split("#", 1)[0])

    def get_by_id(self, resource_id: Optional[str]) -> Optional[Resource]:
        if not resource_id:
            return None
        for resource in self._resources.values():
            if resource.id == resource_id:
                return resource
        return None

    def remove(self, href: str) -> Optional[Resource]:
        """Remove a resource and release its cached content."""
        resource = self._resources.pop(href, None)
        if resource is not None:
            resource.release()
        return resource

    def rename(self, old_href: str, new_href: str) -> Resource:
        """
        Move a resource to a new href, keeping its id.

        Raises:
            KeyError: If no resource exists at old_href
            ValueError: If new_href is already taken
        """
        if new_href in self._resources and new_href != old_href:
            raise ValueError(f"A resource already exists at {new_href}")
        resource = self._resources.pop(old_href)
        resource.href = new_href
        self._resources[new_href] = resource
        return resource

    def release_all(self) -> None:
        """Release the cached content of every resource."""
        for resource in self._resources.values():
            resource.release()

    def hrefs(self) -> List[str]:
        return list(self._resources)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Resource):
            return item.href in self._resources
        return item in self._resources

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources.values()))

    def __len__(self) -> int:
        return len(self._resources)
