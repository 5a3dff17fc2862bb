"""
Archive Stores
==============

ZIP-backed and directory-backed resource stores.
"""

import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator, Tuple, Union
import logging

from epub_core.errors import StoreUnavailable
from epub_core.store.base import ResourceStore

logger = logging.getLogger(__name__)


class ZipArchiveStore(ResourceStore):
    """
    Store reading entries from a ZIP archive (an .epub file).

    The archive is opened for every read and released together with the
    member stream, so concurrent reads of different entries each use their
    own file handle.

    Example:
        store = ZipArchiveStore(Path("book.epub"))
        for name, size in store.entries():
            print(name, size)
    """

    def __init__(self, archive_path: Union[str, Path]):
        self.archive_path = Path(archive_path)

    def open(self, reference: str) -> BinaryIO:
        try:
            archive = zipfile.ZipFile(self.archive_path)
        except (OSError, zipfile.BadZipFile) as e:
            raise StoreUnavailable(f"Cannot open archive {self.archive_path}: {e}") from e

        # The member keeps the underlying file open after the archive closes
        try:
            return archive.open(reference)
        except KeyError as e:
            raise StoreUnavailable(
                f"Entry '{reference}' not found in {self.archive_path}"
            ) from e
        except (OSError, zipfile.BadZipFile, RuntimeError) as e:
            raise StoreUnavailable(
                f"Cannot read entry '{reference}' from {self.archive_path}: {e}"
            ) from e
        finally:
            archive.close()

    def read(self, stream: BinaryIO, length: int) -> bytes:
        """
        Read an archive member, translating archive corruption.

        Raises:
            StoreUnavailable: If the member is truncated, fails its CRC
                check or cannot be decompressed
        """
        try:
            return super().read(stream, length)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise StoreUnavailable(f"Corrupt entry in {self.archive_path}: {e}") from e

    def entries(self) -> Iterator[Tuple[str, int]]:
        """
        Yield (name, uncompressed size) for every file entry in the archive.

        Raises:
            StoreUnavailable: If the archive cannot be opened
        """
        try:
            with zipfile.ZipFile(self.archive_path) as archive:
                infos = archive.infolist()
        except (OSError, zipfile.BadZipFile) as e:
            raise StoreUnavailable(f"Cannot open archive {self.archive_path}: {e}") from e

        for info in infos:
            if info.is_dir():
                continue
            yield info.filename, info.file_size

    def describe(self) -> str:
        return f"archive {self.archive_path}"


class DirectoryStore(ResourceStore):
    """Store reading entries from files below a base directory."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def _resolve(self, reference: str) -> Path:
        base = self.base_dir.resolve()
        path = (base / reference).resolve()
        if path != base and base not in path.parents:
            raise StoreUnavailable(f"Entry '{reference}' lies outside {self.base_dir}")
        return path

    def open(self, reference: str) -> BinaryIO:
        path = self._resolve(reference)
        try:
            return path.open("rb")
        except OSError as e:
            raise StoreUnavailable(f"Cannot open {path}: {e}") from e

    def describe(self) -> str:
        return f"directory {self.base_dir}"
