"""
Processing Framework
====================

Resource processing stages and helpers to run them.

Components:
- ResourceProcessor: Abstract processing stage
- IdentityProcessor / TitleFillProcessor: Built-in stages
- apply_processors / process_resources: Run an ordered list of stages
- ProcessResult: Container for processing results
"""

from epub_core.processing.base import (
    ResourceProcessor,
    IdentityProcessor,
    TitleFillProcessor,
    ProcessResult,
    apply_processors,
    process_resources,
)

__all__ = [
    "ResourceProcessor",
    "IdentityProcessor",
    "TitleFillProcessor",
    "ProcessResult",
    "apply_processors",
    "process_resources",
]
