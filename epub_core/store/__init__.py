"""
Resource Stores
===============

External stores that lazy resources read their content from.

Components:
- ResourceStore: Abstract store interface
- ZipArchiveStore: Entries of a ZIP/EPUB archive
- DirectoryStore: Files below a directory
"""

from epub_core.store.base import ResourceStore
from epub_core.store.zip_store import ZipArchiveStore, DirectoryStore

__all__ = [
    "ResourceStore",
    "ZipArchiveStore",
    "DirectoryStore",
]
