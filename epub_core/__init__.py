"""
EPUB Core Library
=================

Resource handling for EPUB packages:

- Resources with eager or lazy (store-backed) content
- Encoding-aware decoding of text resources
- Title extraction from XHTML content documents
- XSLT transform stages and a pluggable processing-stage interface
- ZIP and directory stores, media-type lookup, configuration

Architecture
------------

    epub_core/
    ├── media/         - Media-type table and lookup
    ├── encoding/      - Byte-order mark / declaration based decoding
    ├── store/         - External stores lazy resources read from
    ├── domain/        - Resource, ResourceCollection, title extraction
    ├── processing/    - Processing-stage interface and runners
    ├── transform/     - XSLT transform stage
    └── config/        - Configuration management

Usage
-----

    from epub_core import ResourceCollection, XslTransformStage, TitleFillProcessor
    from epub_core import process_resources

    resources = ResourceCollection.from_zip(Path("book.epub"))
    stage = XslTransformStage(Path("cleanup.xsl"))
    result = process_resources(resources, [TitleFillProcessor(), stage])
    print(result.summary())

"""

__version__ = "1.0.0"

from epub_core.errors import (
    EpubCoreError,
    ConfigurationError,
    ResourceIOError,
    StoreUnavailable,
    ShortRead,
    TransformError,
    MalformedMarkup,
    TransformFailure,
    InvalidProgram,
)

from epub_core.media.types import (
    MediaType,
    determine_media_type,
)

from epub_core.encoding.detector import (
    detect_encoding,
    open_text_stream,
)

from epub_core.store import (
    ResourceStore,
    ZipArchiveStore,
    DirectoryStore,
)

from epub_core.domain import (
    Resource,
    ResourceCollection,
    find_title,
    get_title,
)

from epub_core.processing import (
    ResourceProcessor,
    IdentityProcessor,
    TitleFillProcessor,
    ProcessResult,
    apply_processors,
    process_resources,
)

from epub_core.transform import (
    XslTransformStage,
    BlockingResolver,
    XhtmlEntityResolver,
)

from epub_core.config import (
    PipelineConfig,
    load_config,
    save_config,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "EpubCoreError",
    "ConfigurationError",
    "ResourceIOError",
    "StoreUnavailable",
    "ShortRead",
    "TransformError",
    "MalformedMarkup",
    "TransformFailure",
    "InvalidProgram",
    # Media types
    "MediaType",
    "determine_media_type",
    # Encoding
    "detect_encoding",
    "open_text_stream",
    # Stores
    "ResourceStore",
    "ZipArchiveStore",
    "DirectoryStore",
    # Domain
    "Resource",
    "ResourceCollection",
    "find_title",
    "get_title",
    # Processing
    "ResourceProcessor",
    "IdentityProcessor",
    "TitleFillProcessor",
    "ProcessResult",
    "apply_processors",
    "process_resources",
    # Transform
    "XslTransformStage",
    "BlockingResolver",
    "XhtmlEntityResolver",
    # Config
    "PipelineConfig",
    "load_config",
    "save_config",
]
